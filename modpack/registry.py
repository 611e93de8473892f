"""
Module registry: assigns each module of a build target a numeric slot.
"""


class ModuleRegistry:
    """
    Maps module names to dense, zero-based slots in the runtime table.

    One registry lives for one output target. It is shared by the per-file
    definition pass and the whole-bundle require pass so both agree on slots.
    """

    def __init__(self):
        self._mapping = {}
        self.count = 0

    def record(self, name):
        """Assign the next slot to name (overwriting any earlier mapping) and return it."""
        slot = self.count
        self._mapping[name] = slot
        self.count += 1
        return slot

    def lookup(self, name):
        """Return the slot for name, or None if it was never recorded."""
        return self._mapping.get(name)

    def reset(self):
        """Forget every module and start numbering from zero again."""
        self._mapping = {}
        self.count = 0

    @property
    def mapping(self):
        """A copy of the name -> slot mapping in recording order."""
        return dict(self._mapping)

    def __contains__(self, name):
        return name in self._mapping

    def __len__(self):
        return self.count

    def __repr__(self):
        return f"ModuleRegistry({self._mapping!r})"
