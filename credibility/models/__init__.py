from credibility.models.verification import Verification
from credibility.models.dispute import Dispute, DisputeReaction
from credibility.models.view import RecordView
from credibility.models.membership import RecordMembership, UserProfile, UnacceptedFlag
from credibility.models.score import HashScore, RecordScore, UserScore, ScoreHistory

__all__ = [
    'Verification',
    'Dispute', 'DisputeReaction',
    'RecordView',
    'RecordMembership', 'UserProfile', 'UnacceptedFlag',
    'HashScore', 'RecordScore', 'UserScore', 'ScoreHistory',
]
