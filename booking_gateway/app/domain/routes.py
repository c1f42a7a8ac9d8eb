"""
Catalog of gateway routes and how each one is forwarded.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from booking_gateway.app.domain.credentials import CredentialSource


class BodyKind(str, Enum):
    NONE = "none"
    JSON = "json"
    MULTIPART = "multipart"


@dataclass(frozen=True)
class RouteSpec:
    """How one inbound route is forwarded upstream.

    ``upstream_path`` is a ``str.format`` template filled from path
    parameters. ``credential`` of ``None`` marks a public route.
    """

    name: str
    method: str
    upstream_path: str
    action: str
    credential: Optional[CredentialSource] = None
    body: BodyKind = BodyKind.NONE
    room_assets: bool = False
    forward_query: bool = False
    required_fields: Tuple[str, ...] = ()

    @property
    def requires_credential(self) -> bool:
        return self.credential is not None


LIST_ROOMS = RouteSpec(
    name="rooms.list",
    method="GET",
    upstream_path="/api/hotels/rooms",
    action="fetch rooms",
    room_assets=True,
)

TOP_RATED_ROOMS = RouteSpec(
    name="rooms.top_rated",
    method="GET",
    upstream_path="/api/hotels/rooms/top-rated",
    action="fetch top-rated rooms",
    room_assets=True,
)

ADMIN_LIST_ROOMS = RouteSpec(
    name="admin.rooms.list",
    method="GET",
    upstream_path="/api/admin/rooms",
    action="fetch rooms",
    credential=CredentialSource.HEADER,
)

ADMIN_CREATE_ROOM = RouteSpec(
    name="admin.rooms.create",
    method="POST",
    upstream_path="/api/admin/rooms",
    action="create room",
    credential=CredentialSource.HEADER,
    body=BodyKind.JSON,
)

ADMIN_GET_ROOM = RouteSpec(
    name="admin.rooms.get",
    method="GET",
    upstream_path="/api/admin/rooms/{room_id}",
    action="fetch room",
    credential=CredentialSource.HEADER,
)

ADMIN_UPDATE_ROOM = RouteSpec(
    name="admin.rooms.update",
    method="PUT",
    upstream_path="/api/admin/rooms/{room_id}",
    action="update room",
    credential=CredentialSource.HEADER,
    body=BodyKind.JSON,
)

ADMIN_DELETE_ROOM = RouteSpec(
    name="admin.rooms.delete",
    method="DELETE",
    upstream_path="/api/admin/rooms/{room_id}",
    action="delete room",
    credential=CredentialSource.HEADER,
)

ADMIN_UPLOAD_IMAGE = RouteSpec(
    name="admin.rooms.upload_image",
    method="POST",
    upstream_path="/api/admin/rooms/upload-image",
    action="upload image",
    credential=CredentialSource.COOKIE,
    body=BodyKind.MULTIPART,
)

ADMIN_UPLOAD_IMAGES = RouteSpec(
    name="admin.rooms.upload_images",
    method="POST",
    upstream_path="/api/admin/rooms/upload-multiple-images",
    action="upload images",
    credential=CredentialSource.COOKIE,
    body=BodyKind.MULTIPART,
)

ADMIN_LIST_USERS = RouteSpec(
    name="admin.users.list",
    method="GET",
    upstream_path="/api/admin/users",
    action="fetch users",
    credential=CredentialSource.HEADER,
)

ADMIN_DASHBOARD = RouteSpec(
    name="admin.dashboard",
    method="GET",
    upstream_path="/api/admin/dashboard",
    action="fetch dashboard stats",
    credential=CredentialSource.HEADER,
)

ADMIN_LOGIN = RouteSpec(
    name="auth.admin_login",
    method="POST",
    upstream_path="/api/auth/admin-login",
    action="log in",
    body=BodyKind.JSON,
    required_fields=("username", "password"),
)

PROXY_GET = RouteSpec(
    name="proxy.get",
    method="GET",
    upstream_path="/api/{path}",
    action="fetch data from API",
    forward_query=True,
)

PROXY_POST = RouteSpec(
    name="proxy.post",
    method="POST",
    upstream_path="/api/{path}",
    action="send data to API",
    body=BodyKind.JSON,
    forward_query=True,
)

ALL_ROUTES = (
    LIST_ROOMS,
    TOP_RATED_ROOMS,
    ADMIN_LIST_ROOMS,
    ADMIN_CREATE_ROOM,
    ADMIN_GET_ROOM,
    ADMIN_UPDATE_ROOM,
    ADMIN_DELETE_ROOM,
    ADMIN_UPLOAD_IMAGE,
    ADMIN_UPLOAD_IMAGES,
    ADMIN_LIST_USERS,
    ADMIN_DASHBOARD,
    ADMIN_LOGIN,
    PROXY_GET,
    PROXY_POST,
)
