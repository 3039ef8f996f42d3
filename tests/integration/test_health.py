from fastapi.testclient import TestClient


def test_health_check_works(client: TestClient) -> None:
    response = client.get("/health-check")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_unknown_route_is_404(client: TestClient) -> None:
    assert client.get("/nope").status_code == 404
