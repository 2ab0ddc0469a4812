import uuid

from story_users.utils.random_id import IDGenerator, UUIDGenerator


def test_uint64_range():
    generator = UUIDGenerator()
    for _ in range(200):
        value = generator.uint64()
        assert 0 <= value < 2**64


def test_uint32_range():
    generator = UUIDGenerator()
    for _ in range(200):
        assert 0 <= generator.uint32() < 2**32


def test_uint64_is_leading_uuid_bytes(monkeypatch):
    fixed = uuid.UUID("0123456789abcdef0011223344556677")
    monkeypatch.setattr(uuid, "uuid4", lambda: fixed)
    generator = UUIDGenerator()

    assert generator.uint64() == 0x0123456789ABCDEF
    assert generator.uint32() == 0x01234567


def test_ids_differ_between_calls():
    generator = UUIDGenerator()
    assert len({generator.uint64() for _ in range(100)}) == 100


def test_satisfies_protocol():
    generator: IDGenerator = UUIDGenerator()
    assert callable(generator.uint64) and callable(generator.uint32)
