"""
Corner storage for the split-merge fitter.

Corners live in an arena owned by CornerLedger and are addressed by slot.
The polygon is a circular doubly-linked ordering over a subset of the slots,
kept through next/prev slot fields. Removed corners stay in the arena until
the ledger is reset.
"""

from dataclasses import dataclass


@dataclass
class Corner:
    """
    A polygon corner. The side it owns runs from this corner to the next
    one in the ordering.
    """
    index: int = -1
    side_error: float = -1.0
    # where the side would be split and the errors of the two new sides
    split_location: int = -1
    split_error0: float = -1.0
    split_error1: float = -1.0
    splitable: bool = True
    next: int = -1
    prev: int = -1


class CornerLedger:
    """Arena of corners plus the circular ordering that forms the polygon."""

    def __init__(self):
        self.corners = []
        self.head = -1
        self.size = 0

    def reset(self):
        """Discard all corners and empty the ordering."""
        self.corners = []
        self.head = -1
        self.size = 0

    def __len__(self):
        return self.size

    def __getitem__(self, slot):
        return self.corners[slot]

    def _allocate(self, index):
        self.corners.append(Corner(index=index))
        return len(self.corners) - 1

    def append(self, index):
        """
        Add a corner at the end of the ordering.

        Returns the slot of the new corner.
        """
        slot = self._allocate(index)
        corner = self.corners[slot]

        if self.head < 0:
            corner.next = slot
            corner.prev = slot
            self.head = slot
        else:
            tail = self.corners[self.head].prev
            corner.prev = tail
            corner.next = self.head
            self.corners[tail].next = slot
            self.corners[self.head].prev = slot

        self.size += 1
        return slot

    def insert_after(self, slot, index):
        """
        Add a corner right after the corner in slot.

        Returns the slot of the new corner.
        """
        new_slot = self._allocate(index)
        corner = self.corners[new_slot]
        before = self.corners[slot]

        corner.prev = slot
        corner.next = before.next
        self.corners[before.next].prev = new_slot
        before.next = new_slot

        self.size += 1
        return new_slot

    def remove(self, slot):
        """Unlink the corner in slot from the ordering."""
        corner = self.corners[slot]

        if self.size == 1:
            self.head = -1
        else:
            self.corners[corner.prev].next = corner.next
            self.corners[corner.next].prev = corner.prev
            if self.head == slot:
                self.head = corner.next

        corner.next = corner.prev = -1
        self.size -= 1

    def next(self, slot):
        """Slot of the corner after slot, wrapping around."""
        return self.corners[slot].next

    def previous(self, slot):
        """Slot of the corner before slot, wrapping around."""
        return self.corners[slot].prev

    def slots(self):
        """Slots of the ordering, starting at the head."""
        slot = self.head
        for _ in range(self.size):
            yield slot
            slot = self.corners[slot].next

    def indices(self):
        """Contour indices of the ordering, starting at the head."""
        return [self.corners[slot].index for slot in self.slots()]

    def side_errors(self):
        """Side errors of the ordering, starting at the head."""
        return [self.corners[slot].side_error for slot in self.slots()]
