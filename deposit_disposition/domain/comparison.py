"""Move-in vs move-out inspection comparison"""

from typing import Dict, List, Optional, Sequence

from deposit_disposition.domain.models import ComparisonRow, InspectionComparison, InspectionItem


def compare_inspections(
    move_in: Optional[Sequence[InspectionItem]],
    move_out: Optional[Sequence[InspectionItem]],
) -> InspectionComparison:
    """
    Pair move-in and move-out items by (room, item).

    Rules:
    - Duplicate move-in keys: last one wins
    - Move-out item with no move-in baseline counts as changed
    - Move-in items absent at move-out are emitted as removed
    - Rows sorted by (room, item), case-sensitive, independent of input order

    A missing inspection is a normal state, reported through the flags
    with an empty comparison.
    """
    if move_in is None or move_out is None:
        return InspectionComparison(
            rows=[],
            missing_move_in=move_in is None,
            missing_move_out=move_out is None,
        )

    baseline: Dict[str, InspectionItem] = {}
    for item in move_in:
        baseline[item.key] = item

    rows: List[ComparisonRow] = []
    for out_item in move_out:
        in_item = baseline.pop(out_item.key, None)
        rows.append(
            ComparisonRow(
                room=out_item.room,
                item=out_item.item,
                move_in=in_item,
                move_out=out_item,
                condition_changed=in_item.condition != out_item.condition if in_item else True,
                damage_added=out_item.has_damage and not (in_item is not None and in_item.has_damage),
            )
        )

    for in_item in baseline.values():
        rows.append(
            ComparisonRow(
                room=in_item.room,
                item=in_item.item,
                move_in=in_item,
                move_out=None,
                condition_changed=True,
                item_removed=True,
            )
        )

    rows.sort(key=lambda row: (row.room, row.item))
    return InspectionComparison(rows=rows)
