import pytest

from richlog.protocol import DuplicateChunkIndex, MalformedHex, MissingChunk, TotalMismatch, TypeMismatch, WireLine
from richlog.reassembly import CompletedItem, FragmentBuffer


def _wire(index: int, chunk: str, type: str = "blob", total: int = 3) -> WireLine:
    return WireLine(type=type, uuid="u1", index=index, total=total, hex_chunk=chunk)


def test_buffer_pins_type_and_total() -> None:
    buffer = FragmentBuffer.start(_wire(2, "bb"))
    assert (buffer.type, buffer.total, buffer.received_count) == ("blob", 3, 0)
    with pytest.raises(TypeMismatch):
        buffer.accept(_wire(1, "aa", type="other"))
    with pytest.raises(TotalMismatch):
        buffer.accept(_wire(1, "aa", total=4))
    buffer.accept(_wire(1, "aa"))


def test_buffer_first_seen_wins() -> None:
    buffer = FragmentBuffer.start(_wire(1, "aa"))
    buffer.add(1, "aa")
    with pytest.raises(DuplicateChunkIndex):
        buffer.add(1, "ff")
    assert buffer.chunks == {1: "aa"}
    assert buffer.received_count == 1


def test_buffer_rejects_out_of_range_index() -> None:
    buffer = FragmentBuffer.start(_wire(1, "aa"))
    with pytest.raises(ValueError, match="outside"):
        buffer.add(4, "aa")


def test_buffer_assembles_in_index_order() -> None:
    buffer = FragmentBuffer.start(_wire(3, "cc"))
    for index, chunk in ((3, "cc"), (1, "aa"), (2, "bb")):
        buffer.add(index, chunk)
    assert buffer.is_complete()
    assert buffer.missing_indices() == []
    assert buffer.assemble() == "aabbcc"
    assert buffer.to_item() == CompletedItem(type="blob", uuid="u1", raw_bytes=b"\xaa\xbb\xcc")


def test_buffer_assemble_reverifies_indices() -> None:
    buffer = FragmentBuffer(uuid="u1", type="blob", total=2, chunks={1: "aa", 3: "cc"})
    assert buffer.is_complete()
    assert buffer.missing_indices() == [2]
    with pytest.raises(MissingChunk, match=r"\[2\]"):
        buffer.assemble()


def test_buffer_to_item_rejects_odd_hex() -> None:
    buffer = FragmentBuffer(uuid="u1", type="blob", total=1, chunks={1: "abc"})
    with pytest.raises(MalformedHex):
        buffer.to_item()


def test_completed_item_helpers() -> None:
    item = CompletedItem(type="command", uuid="u", raw_bytes="hé".encode("utf-8"))
    assert item.size == 3
    assert item.text() == "hé"
    assert item.hex() == "68c3a9"
    assert CompletedItem(type="x", uuid="u", raw_bytes=b"\xff").text(errors="replace") == "�"
