"""A list whose out-of-range reads fall back to a default value."""


class PaddedSequence(list):
    """List with bounds-checked reads that return a default instead of failing."""

    def get_element(self, index, default=None):
        """Return the item at ``index``, or ``default`` if it is out of range.

        Negative indices are out of range; they do not count from the end.
        """
        if 0 <= index < len(self):
            return self[index]
        return default

    def get_triplet(self, index, default=None):
        """Return items ``3*index`` to ``3*index + 2`` as a tuple, padded with ``default``."""
        base = index * 3
        return tuple(self.get_element(base + offset, default) for offset in range(3))