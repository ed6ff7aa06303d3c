import pytest

from modelmap import Mapper, MapperConfig, Registry


@pytest.fixture()
def registry():
    return Registry()


@pytest.fixture()
def mapper(registry):
    return Mapper(registry)


@pytest.fixture()
def mapper_factory(registry):
    def _mapper_factory(**config):
        return Mapper(registry, MapperConfig(**config))

    return _mapper_factory
