def batched(items, size):
    """Split items into lists of at most `size` elements, preserving order."""
    if size < 1:
        raise ValueError(f"Batch size must be positive, got {size}")
    items = list(items)
    return [items[i:i + size] for i in range(0, len(items), size)]
