"""Request bodies and stand-ins shared by the tests."""
from sqlalchemy.exc import OperationalError


class BrokenSession:
    """Stands in for a session whose database is unreachable."""

    def add(self, obj):
        pass

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is down"))

    async def scalar(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is down"))

    async def commit(self):
        raise OperationalError("INSERT", {}, Exception("database is down"))

    async def rollback(self):
        pass


def configuration_payload(**overrides) -> dict:
    payload = {
        "restaurantName": "Spice Garden",
        "outletName": "MG Road",
        "saPassword": "Sa#2024!",
        "nonSaUsername": "posuser",
        "nonSaPassword": "pos#pass",
        "anydeskUsername": "anydesk-01",
        "anydeskPassword": "ad-pass",
        "saPassChange": True,
        "firewallOnAllPcs": True,
    }
    payload.update(overrides)
    return payload


def form_payload(**overrides) -> dict:
    payload = {
        "restaurantName": "Spice Garden",
        "outletName": "MG Road",
        "saPassword": "Sa#2024!",
        "nonSaCredentials": [
            {"username": "posuser", "password": "pos#pass"},
            {"username": "reports", "password": "rep#pass"},
        ],
        "ultraviewerUsername": "uv-01",
        "ultraviewerPassword": "uv-pass",
        "windowsAuthDisable": True,
        "sqlCustomPort": True,
        "posAdminPassChange": True,
        "remarks": "Firewall rules updated on billing PC",
        "userAgent": "Mozilla/5.0 (Windows NT 10.0)",
    }
    payload.update(overrides)
    return payload
