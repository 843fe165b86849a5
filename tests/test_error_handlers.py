import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, ProgrammingError

from event_manager.app.common.exceptions import SeatsFull, register_exception_handlers

errors_app = FastAPI()
register_exception_handlers(errors_app)

RAISED = {
    "operational": OperationalError("SELECT 1", {}, ConnectionRefusedError("connection refused")),
    "interface": InterfaceError("SELECT 1", {}, ConnectionResetError("connection reset")),
    "integrity": IntegrityError("INSERT INTO users", {}, Exception("duplicate key")),
    "programming": ProgrammingError("SELEC 1", {}, Exception("syntax error")),
    "seats": SeatsFull(),
}


@errors_app.get("/raise/{kind}")
async def raise_error(kind: str):
    raise RAISED[kind]


@pytest.fixture
async def errors_client():
    async with AsyncClient(transport=ASGITransport(app=errors_app), base_url="http://test") as ac:
        yield ac


@pytest.mark.parametrize(
    "kind, status_code, code",
    [
        ("operational", 503, "PersistenceUnavailable"),
        ("interface", 503, "PersistenceUnavailable"),
        ("integrity", 500, "InternalError"),
        ("programming", 500, "InternalError"),
        ("seats", 409, "SeatsFull"),
    ],
)
async def test_error_mapping(errors_client, kind, status_code, code):
    response = await errors_client.get(f"/raise/{kind}")

    assert response.status_code == status_code
    body = response.json()
    assert body["success"] is False
    assert body["code"] == code
