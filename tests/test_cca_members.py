import pytest
from sqlmodel import select

from app.models.cca import CCAAppointment, CCAPosition


@pytest.fixture
def sports_cca(make_user, make_cca, make_position, appoint):
    """Basketball CCA with a captain (lead) and one regular player."""
    async def _setup():
        captain = await make_user("Captain")
        player = await make_user("Player")
        cca = await make_cca("Basketball", "sports")
        lead = await make_position(cca, "lead", "Captain")
        await appoint(captain, lead)
        return captain, player, cca
    return _setup


@pytest.mark.asyncio
@pytest.mark.parametrize("phase", ["subcomm_concurrent_ranking", "maincomm_results_available"])
async def test_add_member_forbidden_outside_management_window(
    client, auth_headers, sports_cca, activate_phase, phase
):
    captain, player, cca = await sports_cca()
    await activate_phase(phase)

    res = await client.post(
        f"/api/cca/{cca.name}/addMember",
        json={"user_id": player.id},
        headers=auth_headers(captain),
    )
    assert res.status_code == 403
    assert "member management" in res.json()["detail"]


@pytest.mark.asyncio
async def test_add_then_remove_member(
    client, auth_headers, db_session, sports_cca, activate_phase
):
    captain, player, cca = await sports_cca()
    await activate_phase("subcomm_results_processing")
    headers = auth_headers(captain)

    res = await client.post(f"/api/cca/{cca.name}/addMember", json={"user_id": player.id}, headers=headers)
    assert res.status_code == 200

    res = await client.post(f"/api/cca/{cca.name}/addMember", json={"user_id": player.id}, headers=headers)
    assert res.status_code == 400

    member_position = (await db_session.execute(
        select(CCAPosition).where(
            (CCAPosition.cca_id == cca.id) & (CCAPosition.position_type == "member")
        )
    )).scalar_one()

    res = await client.post(f"/api/cca/{cca.name}/removeMember", json={"user_id": player.id}, headers=headers)
    assert res.status_code == 200

    remaining = (await db_session.execute(
        select(CCAAppointment).where(CCAAppointment.position_id == member_position.id)
    )).scalars().all()
    assert remaining == []


@pytest.mark.asyncio
async def test_cut_member_is_gated_like_add_and_remove(
    client, auth_headers, sports_cca, make_position, appoint, activate_phase
):
    captain, player, cca = await sports_cca()
    manager = await make_position(cca, "team manager", "Team Manager")
    await appoint(player, manager)
    await activate_phase("subcomm_concurrent_ranking")

    res = await client.post(
        f"/api/cca/{cca.name}/cutMember",
        json={"user_id": player.id, "position_id": manager.id},
        headers=auth_headers(captain),
    )
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_cut_member_during_full_results(
    client, auth_headers, db_session, sports_cca, make_position, appoint, activate_phase
):
    captain, player, cca = await sports_cca()
    manager = await make_position(cca, "team manager", "Team Manager")
    await appoint(player, manager)
    await activate_phase("full_results_available")
    headers = auth_headers(captain)

    res = await client.post(
        f"/api/cca/{cca.name}/cutMember",
        json={"user_id": player.id, "position_id": manager.id},
        headers=headers,
    )
    assert res.status_code == 200

    res = await client.post(
        f"/api/cca/{cca.name}/cutMember",
        json={"user_id": player.id, "position_id": manager.id},
        headers=headers,
    )
    assert res.status_code == 400
    assert res.json()["detail"] == "Member has already been cut"

    comments = (await db_session.execute(
        select(CCAAppointment.comments).where(
            (CCAAppointment.user_id == player.id) & (CCAAppointment.position_id == manager.id)
        )
    )).scalar_one()
    assert comments == "cut"


@pytest.mark.asyncio
async def test_management_requires_lead_or_vice(client, auth_headers, sports_cca, activate_phase):
    _, player, cca = await sports_cca()
    await activate_phase("full_results_available")

    res = await client.post(
        f"/api/cca/{cca.name}/addMember",
        json={"user_id": player.id},
        headers=auth_headers(player),
    )
    assert res.status_code == 403
    assert "lead/vice" in res.json()["detail"]


@pytest.mark.asyncio
async def test_management_only_for_sports_and_culture(
    client, auth_headers, make_user, make_cca, activate_phase
):
    user = await make_user("Chair")
    cca = await make_cca("Hall Council", "committee")
    await activate_phase("full_results_available")

    res = await client.post(
        f"/api/cca/{cca.name}/addMember",
        json={"user_id": user.id},
        headers=auth_headers(user),
    )
    assert res.status_code == 403
    assert "sports and culture" in res.json()["detail"]


@pytest.mark.asyncio
async def test_unknown_cca(client, auth_headers, make_user, activate_phase):
    user = await make_user("Chair")
    await activate_phase("full_results_available")

    res = await client.post("/api/cca/Nope/addMember", json={"user_id": user.id}, headers=auth_headers(user))
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_vice_cannot_cut_the_captain(
    client, auth_headers, db_session, make_user, sports_cca, make_position, appoint, activate_phase
):
    captain, _, cca = await sports_cca()
    vice_user = await make_user("Vice")
    vice = await make_position(cca, "vice", "Vice Captain")
    await appoint(vice_user, vice)
    lead_id = (await db_session.execute(
        select(CCAPosition.id).where(
            (CCAPosition.cca_id == cca.id) & (CCAPosition.position_type == "lead")
        )
    )).scalar_one()
    await activate_phase("full_results_available")

    res = await client.post(
        f"/api/cca/{cca.name}/cutMember",
        json={"user_id": captain.id, "position_id": lead_id},
        headers=auth_headers(vice_user),
    )
    assert res.status_code == 400
    assert "Only members and team managers" in res.json()["detail"]

    comments = (await db_session.execute(
        select(CCAAppointment.comments).where(CCAAppointment.user_id == captain.id)
    )).scalar_one()
    assert comments is None


@pytest.mark.asyncio
async def test_cut_member_is_listed_as_cut_and_can_be_reinstated(
    client, auth_headers, sports_cca, activate_phase
):
    captain, player, cca = await sports_cca()
    await activate_phase("subcomm_results_processing")
    headers = auth_headers(captain)

    res = await client.post(f"/api/cca/{cca.name}/addMember", json={"user_id": player.id}, headers=headers)
    assert res.status_code == 200

    members = (await client.get(f"/api/cca/{cca.name}/members", headers=headers)).json()
    member_position_id = members["member_position_id"]
    assert [m["user_id"] for m in members["groupedMembers"]["members"]] == [player.id]

    res = await client.post(
        f"/api/cca/{cca.name}/cutMember",
        json={"user_id": player.id, "position_id": member_position_id},
        headers=headers,
    )
    assert res.status_code == 200

    grouped = (await client.get(f"/api/cca/{cca.name}/members", headers=headers)).json()["groupedMembers"]
    assert grouped["members"] == []
    assert [m["user_id"] for m in grouped["cut"]] == [player.id]
    assert grouped["cut"][0]["cut"] is True

    res = await client.post(f"/api/cca/{cca.name}/addMember", json={"user_id": player.id}, headers=headers)
    assert res.status_code == 200

    grouped = (await client.get(f"/api/cca/{cca.name}/members", headers=headers)).json()["groupedMembers"]
    assert [m["user_id"] for m in grouped["members"]] == [player.id]
    assert grouped["cut"] == []


# ------------------------------------------------------------------
# MEMBER LISTING
# ------------------------------------------------------------------
@pytest.mark.asyncio
@pytest.mark.parametrize("phase,can_manage", [
    ("subcomm_results_processing", True),
    ("full_results_available", True),
    ("subcomm_concurrent_ranking", False),
    ("maincomm_interviews", False),
])
async def test_members_permissions_follow_management_window(
    client, auth_headers, sports_cca, activate_phase, phase, can_manage
):
    captain, _, cca = await sports_cca()
    await activate_phase(phase)

    res = await client.get(f"/api/cca/{cca.name}/members", headers=auth_headers(captain))
    assert res.status_code == 200

    data = res.json()
    assert data["permissions"] == {"canManageMembers": can_manage, "ccaType": "sports"}
    assert data["cca"]["name"] == cca.name
    assert [m["user_id"] for m in data["groupedMembers"]["lead"]] == [captain.id]
    assert data["total_members"] == 1
    assert data["member_position_id"] is None


@pytest.mark.asyncio
async def test_committee_members_are_always_manageable(
    client, auth_headers, make_user, make_cca, make_position, appoint, activate_phase
):
    president = await make_user("President")
    treasurer = await make_user("Treasurer")
    cca = await make_cca("Hall Council", "committee")
    await appoint(president, await make_position(cca, "lead", "President"))
    await appoint(treasurer, await make_position(cca, "blockcomm", "Block Rep"))
    await activate_phase("maincomm_interviews")

    res = await client.get(f"/api/cca/{cca.name}/members", headers=auth_headers(president))
    assert res.status_code == 200

    data = res.json()
    assert data["permissions"]["canManageMembers"] is True
    assert [m["user_id"] for m in data["groupedMembers"]["maincomm"]] == [treasurer.id]


@pytest.mark.asyncio
async def test_members_requires_lead_or_vice(client, auth_headers, sports_cca, activate_phase):
    _, player, cca = await sports_cca()
    await activate_phase("full_results_available")

    res = await client.get(f"/api/cca/{cca.name}/members", headers=auth_headers(player))
    assert res.status_code == 403

    res = await client.get("/api/cca/Nope/members", headers=auth_headers(player))
    assert res.status_code == 404
