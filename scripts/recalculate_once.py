#!/usr/bin/env python3
"""Run one score recalculation (or a full sweep) for testing/debugging."""

import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from credibility import create_app
from credibility.models.score import SCORE_TRIGGERS
from credibility.pipeline.orchestrator import recalculate, run_sweep


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument('record_hash', nargs='?')
    parser.add_argument('record_id', nargs='?')
    parser.add_argument('user_id', nargs='?')
    parser.add_argument('trigger', nargs='?', default='manual', choices=SCORE_TRIGGERS)
    parser.add_argument('--sweep', action='store_true', help='Recalculate every known key')
    args = parser.parse_args(argv)

    if not args.sweep and not (args.record_hash and args.record_id and args.user_id):
        parser.error('record_hash, record_id and user_id are required unless --sweep is given')

    app = create_app()
    with app.app_context():
        if args.sweep:
            print(f"Sweep complete: {run_sweep()}")
            return

        result = recalculate(args.record_hash, args.record_id, args.user_id, trigger=args.trigger)
        print(f"Hash {args.record_hash}: {result.hash_score.score}")
        print(f"Record {args.record_id}: {result.record_score.score}")
        print(f"User {args.user_id}: {result.user_score.credibility_score}")


if __name__ == '__main__':
    main()
