"""Logins, server role membership and linked servers."""

from ..models.records import LinkedServer, LoginInfo, ServerRoleMember
from .base import QueryCollector


class ServerRolesCollector(QueryCollector):
    name = "server_roles"
    model = ServerRoleMember
    query = """
SELECT m.name AS login_name, r.name AS role_name
FROM sys.server_role_members rm
JOIN sys.server_principals r ON r.principal_id = rm.role_principal_id
JOIN sys.server_principals m ON m.principal_id = rm.member_principal_id
ORDER BY r.name, m.name
"""


class LoginsCollector(QueryCollector):
    """SQL logins, Windows logins and Windows groups."""

    name = "logins"
    model = LoginInfo
    query = """
SELECT name, type_desc, create_date, is_disabled
FROM sys.server_principals
WHERE type IN ('S', 'U', 'G')
ORDER BY name
"""


class LinkedServersCollector(QueryCollector):
    name = "linked_servers"
    model = LinkedServer
    query = """
SELECT name, product, provider, data_source, catalog
FROM sys.servers
WHERE is_linked = 1
ORDER BY name
"""
