import pytest

from avtool.git.constants import MISSING, ObjectType, UpstreamStatus, short_sha


def test_short_sha_truncates_long_ids():
    sha = "0123456789abcdef0123456789abcdef01234567"
    assert short_sha(sha) == "0123456"
    assert sha.startswith(short_sha(sha))


def test_short_sha_of_missing_is_all_zero_prefix():
    result = short_sha(MISSING)
    assert len(result) == 7
    assert set(result) == {"0"}
    assert MISSING.startswith(result)


@pytest.mark.parametrize("value", ["", "abc", "abcdef1"])
def test_short_sha_keeps_short_ids(value):
    assert short_sha(value) == value


@pytest.mark.parametrize(
    "value, member",
    [
        (">", UpstreamStatus.AHEAD),
        ("<", UpstreamStatus.BEHIND),
        ("<>", UpstreamStatus.DIVERGENT),
        ("=", UpstreamStatus.IN_SYNC),
    ],
)
def test_upstream_status_from_trackshort(value, member):
    assert UpstreamStatus(value) is member
    assert str(member) == value


def test_upstream_status_rejects_unknown():
    with pytest.raises(ValueError):
        UpstreamStatus("?")


@pytest.mark.parametrize("name", ["commit", "tree", "blob", "tag"])
def test_object_type_round_trip(name):
    assert ObjectType(name).value == name
    assert str(ObjectType(name)) == name


def test_object_type_rejects_unknown():
    with pytest.raises(ValueError):
        ObjectType("missing")