"""Shared fixtures for Build Log tests."""

import pytest

from buildlog.app import create_services
from buildlog.config import BuildLogConfig
from buildlog.types import Build, NamedRef


def make_build(build_id: int = 1, name: str = "Castle") -> Build:
    return Build(
        id=build_id,
        name=name,
        authors=[NamedRef(2, "Steve"), NamedRef(1, "Alex")],
        themes=[NamedRef(1, "Medieval")],
        colors=[NamedRef(2, "Gray"), NamedRef(1, "Brown")],
        description="A stone castle on a hill",
        screenshots=["castle2.png", "castle1.png"],
        schem_file=b"\x00\x01\x02\x03",
    )


@pytest.fixture
def castle():
    return make_build()


@pytest.fixture
def config(tmp_path):
    return BuildLogConfig(log_dir=str(tmp_path / "logs"), submit_timeout=0.1)


@pytest.fixture
def services(config, castle):
    svc = create_services(config, builds=[castle, make_build(2, "Tower")])
    svc.start()
    yield svc
    svc.shutdown(wait=True)
