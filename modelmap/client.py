import httpx

import logging
from typing import Any, Optional, TypeVar

from .mapper import Mapper, mapper_for

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MappedClient:
    """
    JSON API client speaking mapped models.
    Response bodies go through `from_data`, request bodies through `to_data`.
    """
    def __init__(self, url: str, mapper: Optional[Mapper] = None, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self.mapper = mapper

        self.client = httpx.AsyncClient(base_url=url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "MappedClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    def _mapper(self, model_type: type) -> Mapper:
        return self.mapper or mapper_for(model_type)

    def _body(self, instance: Any) -> Any:
        if instance is None:
            return None
        if isinstance(instance, (list, tuple)):
            return [self._body(item) for item in instance]
        return self._mapper(type(instance)).to_data(instance)

    def _decode(self, response: httpx.Response, model_type: Optional[type[T]]) -> Optional[T | list[T] | Any]:
        response.raise_for_status()
        if not response.content:
            return None
        data = response.json()
        if model_type is None:
            return data
        return self._mapper(model_type).from_data(model_type, data)

    async def get(self, path: str, model_type: type[T], params: Optional[dict[str, Any]] = None) -> T | list[T]:
        response = await self.client.get(path, params=params)
        logger.debug(f"GET {response.url} -> {response.status_code}")
        return self._decode(response, model_type)

    async def post(self, path: str, instance: Any = None, model_type: Optional[type[T]] = None) -> Optional[T | list[T] | Any]:
        response = await self.client.post(path, json=self._body(instance))
        logger.debug(f"POST {response.url} -> {response.status_code}")
        return self._decode(response, model_type)

    async def put(self, path: str, instance: Any = None, model_type: Optional[type[T]] = None) -> Optional[T | list[T] | Any]:
        response = await self.client.put(path, json=self._body(instance))
        logger.debug(f"PUT {response.url} -> {response.status_code}")
        return self._decode(response, model_type)

    async def delete(self, path: str) -> None:
        response = await self.client.delete(path)
        logger.debug(f"DELETE {response.url} -> {response.status_code}")
        response.raise_for_status()
