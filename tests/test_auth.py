import pytest

from app.core.database import AsyncSessionLocal
from app.services.auth_service import create_user


@pytest.mark.asyncio
async def test_login_and_me(client):
    async with AsyncSessionLocal() as session:
        await create_user(session, "Resident", "resident@hall.edu", "s3cret-pass", room="B-204")

    res = await client.post("/api/auth/login", json={"email": "resident@hall.edu", "password": "s3cret-pass"})
    assert res.status_code == 200
    token = res.json()["access_token"]

    me = await client.get("/api/user/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "resident@hall.edu"
    assert me.json()["room"] == "B-204"


@pytest.mark.asyncio
async def test_login_wrong_password(client):
    async with AsyncSessionLocal() as session:
        await create_user(session, "Resident", "resident@hall.edu", "s3cret-pass")

    res = await client.post("/api/auth/login", json={"email": "resident@hall.edu", "password": "nope"})
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_invalid_token_rejected(client):
    res = await client.get("/api/user/me", headers={"Authorization": "Bearer not-a-token"})
    assert res.status_code == 401
