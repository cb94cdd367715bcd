async def test_get_profile(client, auth_headers):
    response = await client.get("/profile", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["restaurant_name"] == "Blue Cafe"
    assert data["slug"] == "blue-cafe"
    assert data["upi_id"] == "bluecafe@okicici"


async def test_update_profile(client, auth_headers):
    response = await client.put("/profile", headers=auth_headers, json={
        "upi_id": "blue.cafe@ybl",
        "address": "12 MG Road"
    })

    assert response.status_code == 200
    data = response.json()
    assert data["upi_id"] == "blue.cafe@ybl"
    assert data["address"] == "12 MG Road"
    assert data["restaurant_name"] == "Blue Cafe"


async def test_update_profile_rejects_bad_upi(client, auth_headers):
    response = await client.put("/profile", headers=auth_headers, json={"upi_id": "not a upi id"})

    assert response.status_code == 422


async def test_profile_requires_token(client, session):
    response = await client.get("/profile")

    assert response.status_code == 401
