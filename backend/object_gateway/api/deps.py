from fastapi import Request

from object_gateway.services.listing import ObjectLister
from object_gateway.services.objects import ObjectAccessor
from object_gateway.services.storage import StorageServices


def get_storage(request: Request) -> StorageServices:
    return request.app.state.storage


def get_object_lister(request: Request) -> ObjectLister:
    return get_storage(request).lister


def get_object_accessor(request: Request) -> ObjectAccessor:
    return get_storage(request).accessor
