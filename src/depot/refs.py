"""store_to_refs — pull reactive members out of a store without losing tracking.

    refs = store_to_refs(counter)
    count, double = refs["count"], refs["double"]
    count.set(count.get() + 1)   # same as counter.count += 1
    double.get()                 # tracked read of the getter
"""

from __future__ import annotations

from depot.store import MemberKind, Store


def store_to_refs(store: Store) -> dict:
    """Map each state and computed member name to a cell.

    State members come back as the FieldRef into the store's slice (or the
    cell itself when it was never linked); computed members as their
    Computed. Actions and plain values are left out.
    """
    refs = {}
    for name, member in store._members.items():
        if member.kind in (MemberKind.STATE, MemberKind.COMPUTED):
            refs[name] = member.value
    return refs
