# backend/brandhub/services/block_service.py
"""
Block Service

Ordered content blocks of a landing page.

Ordering policy:
- order values on a page are contiguous integers starting at 0
- the service renumbers on insert, move and delete; clients never have to
- every multi-row renumbering happens inside the same store_transaction as
  the row change that caused it, so readers never see a gapped or
  duplicated sequence

WHY: There is no unique constraint on (landing_page_id, order). Shifting a
range of rows by one would transiently collide under such a constraint on
stores that check it per row.
"""
from __future__ import annotations

from ..errors import NotFoundError, ReferentialError, ValidationError
from ..extensions import db
from ..models import Block, LandingPage
from ..validation import require_text
from .concurrency import store_transaction


def _validate_type(block_type) -> str:
    block_type = require_text(block_type, "type")
    if len(block_type) > 64:
        raise ValidationError("type exceeds max length 64")
    return block_type


def _validate_content(content) -> dict:
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ValidationError("content must be an object")
    return content


def _validate_order(order) -> int:
    if isinstance(order, bool) or not isinstance(order, int):
        raise ValidationError("order must be an integer")
    return order


def _require_page(page_id: int) -> LandingPage:
    page = db.session.get(LandingPage, page_id)
    if page is None:
        raise NotFoundError("Landing page not found")
    return page


def _ordered(page_id: int) -> list[Block]:
    return (
        db.session.query(Block)
        .filter(Block.landing_page_id == page_id)
        .order_by(Block.order.asc(), Block.id.asc())
        .all()
    )


def get_block(block_id: int) -> Block:
    block = db.session.get(Block, block_id)
    if block is None:
        raise NotFoundError("Block not found")
    return block


def list_blocks(page_id: int) -> list[Block]:
    """Blocks in render order."""
    _require_page(page_id)
    return _ordered(page_id)


def insert_block(page_id: int, block_type, content=None, order=None) -> Block:
    """
    Insert a block at ``order`` (default: append).

    The position is clamped to 0..len(blocks). Blocks at or after it move
    down by one in a single UPDATE.
    """
    block_type = _validate_type(block_type)
    content = _validate_content(content)
    if db.session.get(LandingPage, page_id) is None:
        raise ReferentialError("Landing page does not exist")

    count = db.session.query(Block).filter(Block.landing_page_id == page_id).count()
    position = count if order is None else min(max(_validate_order(order), 0), count)

    block = Block(landing_page_id=page_id, type=block_type, order=position, content=content)
    with store_transaction() as session:
        session.query(Block).filter(
            Block.landing_page_id == page_id,
            Block.order >= position,
        ).update({Block.order: Block.order + 1}, synchronize_session=False)
        session.add(block)
    return block


def update_block(block_id: int, block_type=None, content=None, order=None) -> Block:
    """
    Change a block's type and/or content, and optionally move it.

    A move renumbers the rest of the page in the same transaction.
    """
    block = get_block(block_id)
    changes: dict = {}
    if block_type is not None:
        changes["type"] = _validate_type(block_type)
    if content is not None:
        changes["content"] = _validate_content(content)

    blocks = None
    if order is not None:
        order = _validate_order(order)
        blocks = [b for b in _ordered(block.landing_page_id) if b.id != block.id]
        blocks.insert(min(max(order, 0), len(blocks)), block)

    with store_transaction():
        for k, v in changes.items():
            setattr(block, k, v)
        for index, b in enumerate(blocks or ()):
            if b.order != index:
                b.order = index
    return block


def move_block(block_id: int, new_order) -> list[Block]:
    """Move one block to ``new_order`` (clamped) and renumber the page."""
    new_order = _validate_order(new_order)
    block = get_block(block_id)
    page_id = block.landing_page_id

    blocks = [b for b in _ordered(page_id) if b.id != block.id]
    position = min(max(new_order, 0), len(blocks))
    blocks.insert(position, block)

    with store_transaction():
        for index, b in enumerate(blocks):
            if b.order != index:
                b.order = index
    return _ordered(page_id)


def reorder_blocks(page_id: int, block_ids) -> list[Block]:
    """
    Apply a complete new ordering to a page.

    ``block_ids`` must name every block of the page exactly once. All rows
    are rewritten in one transaction; on any failure none are.
    """
    _require_page(page_id)
    if not isinstance(block_ids, list) or any(
        isinstance(i, bool) or not isinstance(i, int) for i in block_ids
    ):
        raise ValidationError("block_ids must be a list of block ids")
    if len(set(block_ids)) != len(block_ids):
        raise ValidationError("block_ids must not contain duplicates")

    blocks = {b.id: b for b in _ordered(page_id)}
    if set(block_ids) != set(blocks):
        raise ValidationError("block_ids must list exactly the blocks of this page")

    with store_transaction():
        for index, block_id in enumerate(block_ids):
            blocks[block_id].order = index
    return _ordered(page_id)


def delete_block(block_id: int) -> None:
    """Remove a block and close the gap it leaves."""
    block = get_block(block_id)
    page_id, position = block.landing_page_id, block.order

    with store_transaction() as session:
        session.delete(block)
        session.flush()
        session.query(Block).filter(
            Block.landing_page_id == page_id,
            Block.order > position,
        ).update({Block.order: Block.order - 1}, synchronize_session=False)
