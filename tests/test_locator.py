import pytest

from software_portal.locator import (
    is_supported,
    locate,
    normalize_project,
    valid_package_name,
    valid_project_name,
)
from software_portal.models import FeedSource


@pytest.mark.parametrize("project,expected", [
    ("openSUSE:Factory", "factory"),
    ("factory", "factory"),
    ("openSUSE:Leap:15.1", "leap:15.1"),
    ("leap15.1", "leap:15.1"),
    ("Leap:15.0", "leap:15.0"),
    ("  openSUSE:Leap:42.3 ", "leap:42.3"),
    ("home:someone", "home:someone"),
    ("", ""),
])
def test_normalize_project(project, expected):
    assert normalize_project(project) == expected


def test_factory_feeds():
    sources = locate("openSUSE:Factory", mirror="https://download.opensuse.org/")

    assert sources == [
        FeedSource("oss", "https://download.opensuse.org/tumbleweed/repo/oss"),
        FeedSource("non-oss", "https://download.opensuse.org/tumbleweed/repo/non-oss"),
    ]
    assert sources[0].index_url == "https://download.opensuse.org/tumbleweed/repo/oss/repodata/repomd.xml"
    assert not sources[0].is_direct


def test_leap_feeds():
    sources = locate("leap15.1", mirror="https://mirror.example")

    assert [s.url for s in sources] == [
        "https://mirror.example/distribution/leap/15.1/repo/oss",
        "https://mirror.example/distribution/leap/15.1/repo/non-oss",
    ]


def test_unknown_projects_have_no_feeds():
    assert locate("openSUSE:Leap:42.3") == []
    assert locate("home:someone:branches") == []
    assert not is_supported("openSUSE:Leap:42.3")
    assert is_supported("openSUSE:Leap:15.0")


def test_components_are_not_repeated():
    sources = locate("factory", mirror="https://m", components=["oss", "oss", "non-oss"])

    assert [s.component for s in sources] == ["oss", "non-oss"]


def test_custom_project_table():
    sources = locate("openSUSE:Leap:15.2", mirror="https://m",
                     projects={"leap:15.2": "distribution/leap/15.2/repo/{component}"},
                     components=["oss"])

    assert sources == [FeedSource("oss", "https://m/distribution/leap/15.2/repo/oss")]


def test_name_validators():
    assert valid_project_name("openSUSE:Leap:15.1")
    assert valid_project_name("home:user:branches:devel")
    assert not valid_project_name("x")
    assert not valid_project_name(":factory")
    assert not valid_project_name("factory\n")

    assert valid_package_name("libstdc++6")
    assert valid_package_name("perl-Foo@bar~1")
    assert not valid_package_name("-dash")
    assert not valid_package_name("")
