import pytest

from migration_checker.normalization import strip_dot_num


@pytest.mark.parametrize(
    ("key", "expected"),
    [
        ("node.attr.3", "node.attr"),
        ("node.attr", "node.attr"),
        ("discovery.zen.ping.unicast.hosts.12", "discovery.zen.ping.unicast.hosts"),
        ("network.host", "network.host"),
        ("index.v2", "index.v2"),
    ],
)
def test_strip_dot_num(key: str, expected: str) -> None:
    assert strip_dot_num(key) == expected


def test_strip_dot_num_removes_a_single_segment() -> None:
    assert strip_dot_num("path.data.1.2") == "path.data.1"
