"""Tests for batched image URL resolution."""

from __future__ import annotations

import pytest
from prometheus_client import REGISTRY
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from app.core.config import Settings
from app.db.models import Image
from app.services import images
from app.services.images import batch_resolve_image_urls, parse_json_ids, s3_fallback_url

M = 1
SETTINGS = Settings(image_s3_bucket="bucket", image_s3_region="us-east-1")


@pytest.fixture
def stored(seed):
    seed.merchant(M)
    seed.merchant(2)
    seed.image(M, "IMG1", "https://cdn.example.com/1.jpg")
    seed.image(M, "IMG2", "https://cdn.example.com/2.jpg")
    seed.image(2, "IMG9", "https://cdn.example.com/9.jpg")
    return seed


def test_parse_json_ids():
    assert parse_json_ids(None) == []
    assert parse_json_ids(["A", None, "B"]) == ["A", "B"]
    assert parse_json_ids('["A"]') == ["A"]
    assert parse_json_ids("not json") == []
    assert parse_json_ids({"id": "A"}) == []


def test_s3_fallback_url():
    assert s3_fallback_url("XYZ", SETTINGS) == (
        "https://bucket.s3.us-east-1.amazonaws.com/files/XYZ/original.jpeg"
    )


def test_resolves_all_rows_with_one_query(db, stored):
    statements = []

    def count(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    rows = [
        {"images": ["IMG1"]},
        {"images": [], "item_images": ["IMG2"]},
        {"images": None, "item_images": None},
        {"images": ["IMG1", "MISSING"]},
        {"images": ["IMG9"]},
    ]
    event.listen(db.get_bind(), "before_cursor_execute", count)
    try:
        result = batch_resolve_image_urls(db, M, rows, SETTINGS)
    finally:
        event.remove(db.get_bind(), "before_cursor_execute", count)

    assert len([s for s in statements if s.lstrip().upper().startswith("SELECT")]) == 1
    assert result[0] == ["https://cdn.example.com/1.jpg"]
    assert result[1] == ["https://cdn.example.com/2.jpg"]
    assert result[2] == []
    assert result[3] == [
        "https://cdn.example.com/1.jpg",
        s3_fallback_url("MISSING", SETTINGS),
    ]
    # another merchant's image is never served
    assert result[4] == [s3_fallback_url("IMG9", SETTINGS)]


def test_no_images_no_query(db, stored):
    assert batch_resolve_image_urls(db, M, [{"images": []}], SETTINGS) == {0: []}


def test_lookup_failure_falls_back_to_s3(db, stored, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(images, "exec_scoped", broken)
    before = REGISTRY.get_sample_value("image_lookup_failures_total") or 0.0

    result = batch_resolve_image_urls(db, M, [{"images": ["IMG1"]}], SETTINGS)

    assert result == {0: [s3_fallback_url("IMG1", SETTINGS)]}
    assert REGISTRY.get_sample_value("image_lookup_failures_total") == before + 1


def test_lookup_failure_keeps_callers_pending_work(db, stored, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    db.add(Image(id="IMG5", merchant_id=M, url="https://cdn.example.com/5.jpg"))
    db.flush()
    monkeypatch.setattr(images, "exec_scoped", broken)

    batch_resolve_image_urls(db, M, [{"images": ["IMG5"]}], SETTINGS)

    monkeypatch.undo()
    assert db.get(Image, "IMG5") is not None
    assert batch_resolve_image_urls(db, M, [{"images": ["IMG5"]}], SETTINGS) == {
        0: ["https://cdn.example.com/5.jpg"]
    }
