"""
Low-level OOXML helpers for python-docx tables and cells.

python-docx exposes widths and alignment but not shading, cell borders or
table cell margins; these helpers write the ``w:*`` elements directly and
insert them in schema order.
"""
from __future__ import annotations

from typing import Optional

from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Length
from docx.table import Table, _Cell

# Elements that must follow w:tcBorders / w:shd inside w:tcPr
_TCPR_AFTER_SHD = (
    "w:noWrap", "w:tcMar", "w:textDirection", "w:tcFitText", "w:vAlign",
    "w:hideMark", "w:headers", "w:cellIns", "w:cellDel", "w:cellMerge",
    "w:tcPrChange",
)
_TCPR_AFTER_BORDERS = ("w:shd",) + _TCPR_AFTER_SHD
_TBLPR_AFTER_CELL_MAR = ("w:tblLook", "w:tblCaption", "w:tblDescription", "w:tblPrChange")
_TBLPR_AFTER_LAYOUT = ("w:tblCellMar",) + _TBLPR_AFTER_CELL_MAR


def _replace_child(parent, tag: str, element, successors) -> None:
    existing = parent.find(qn(tag))
    if existing is not None:
        parent.remove(existing)
    parent.insert_element_before(element, *successors)


def shade_cell(cell: _Cell, fill: str) -> None:
    """Fill a cell with a solid background colour (hex ``RRGGBB``)."""
    tc_pr = cell._tc.get_or_add_tcPr()
    shd = OxmlElement("w:shd")
    shd.set(qn("w:val"), "clear")
    shd.set(qn("w:color"), "auto")
    shd.set(qn("w:fill"), fill)
    _replace_child(tc_pr, "w:shd", shd, _TCPR_AFTER_SHD)


def set_cell_borders(cell: _Cell, color: Optional[str], size: int = 4) -> None:
    """
    Draw a single-line border on all four cell edges.

    A ``color`` of None removes the borders (``w:val="nil"``).
    """
    tc_pr = cell._tc.get_or_add_tcPr()
    borders = OxmlElement("w:tcBorders")
    for edge in ("top", "left", "bottom", "right"):
        border = OxmlElement(f"w:{edge}")
        if color is None:
            border.set(qn("w:val"), "nil")
        else:
            border.set(qn("w:val"), "single")
            border.set(qn("w:sz"), str(size))
            border.set(qn("w:space"), "0")
            border.set(qn("w:color"), color)
        borders.append(border)
    _replace_child(tc_pr, "w:tcBorders", borders, _TCPR_AFTER_BORDERS)


def set_table_layout(table: Table, *column_widths: Length) -> None:
    """Full-width table with fixed layout and the given grid column widths."""
    table.autofit = False
    tbl_pr = table._tbl.tblPr
    tbl_w = tbl_pr.find(qn("w:tblW"))
    if tbl_w is None:
        tbl_w = OxmlElement("w:tblW")
        tbl_pr.insert_element_before(tbl_w, "w:jc", "w:tblCellSpacing", "w:tblInd", *_TBLPR_AFTER_LAYOUT)
    tbl_w.set(qn("w:type"), "pct")
    tbl_w.set(qn("w:w"), "5000")

    for column, width in zip(table.columns, column_widths):
        column.width = width
        for cell in column.cells:
            cell.width = width


def set_table_cell_margins(table: Table, top: int, bottom: int, left: int, right: int) -> None:
    """Default cell padding for every cell in the table, in twentieths of a point."""
    tbl_pr = table._tbl.tblPr
    cell_mar = OxmlElement("w:tblCellMar")
    for edge, value in (("top", top), ("left", left), ("bottom", bottom), ("right", right)):
        margin = OxmlElement(f"w:{edge}")
        margin.set(qn("w:w"), str(value))
        margin.set(qn("w:type"), "dxa")
        cell_mar.append(margin)
    _replace_child(tbl_pr, "w:tblCellMar", cell_mar, _TBLPR_AFTER_CELL_MAR)
