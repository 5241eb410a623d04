"""Contract tests for issue and work-order endpoints."""

from buildops.models.user import UserRole


def as_user(user) -> dict:
    return {"X-User-Id": str(user.id)}


class TestIssueEndpoints:
    def test_create_issue_is_attributed(self, client, managed_building, tenant_user):
        response = client.post(
            "/api/issues",
            json={
                "buildingId": managed_building.id,
                "title": "Leaking tap",
                "description": "Kitchen tap drips",
                "category": "PLUMBING",
                "unitId": managed_building.units[0].id,
            },
            headers=as_user(tenant_user),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["operatorPeriodId"] == managed_building.current_operator_period_id
        assert data["status"] == "PENDING"
        assert data["priority"] == "MEDIUM"
        assert data["submittedById"] == tenant_user.id

        fetched = client.get(f"/api/issues/{data['id']}", headers=as_user(tenant_user))
        assert fetched.status_code == 200
        assert fetched.json() == data

    def test_issue_on_unassigned_building_has_null_period(self, client, building, tenant_user):
        response = client.post(
            "/api/issues",
            json={
                "buildingId": building.id,
                "title": "Leaking tap",
                "description": "Kitchen tap drips",
                "category": "PLUMBING",
            },
            headers=as_user(tenant_user),
        )
        assert response.status_code == 201
        assert response.json()["operatorPeriodId"] is None

    def test_invalid_category_is_400(self, client, managed_building, tenant_user):
        response = client.post(
            "/api/issues",
            json={
                "buildingId": managed_building.id,
                "title": "Overgrown hedge",
                "description": "Front garden",
                "category": "GARDENING",
            },
            headers=as_user(tenant_user),
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_missing_issue_is_404(self, client, tenant_user):
        response = client.get("/api/issues/999", headers=as_user(tenant_user))
        assert response.status_code == 404
        assert response.json()["error"] == {"code": "NOT_FOUND", "message": "Issue not found"}


class TestWorkOrderEndpoints:
    def test_work_order_inherits_issue_period_across_handoff(
        self, client, managed_building, hoa, tenant_user, manager_user, user_factory
    ):
        first_period = managed_building.current_operator_period_id
        issue = client.post(
            "/api/issues",
            json={
                "buildingId": managed_building.id,
                "title": "Leaking tap",
                "description": "Kitchen tap drips",
                "category": "PLUMBING",
            },
            headers=as_user(tenant_user),
        ).json()

        handoff = client.post(
            f"/api/buildings/{managed_building.id}/transition",
            json={
                "fromOperatorPeriodId": first_period,
                "toOperatorType": "HOA",
                "toOperatorId": hoa.id,
                "effectiveDate": "2024-06-01T00:00:00Z",
            },
            headers=as_user(manager_user),
        )
        assert handoff.status_code == 201

        technician = user_factory(UserRole.MAINTENANCE, "tech@acme.example")
        response = client.post(
            "/api/work-orders",
            json={
                "buildingId": managed_building.id,
                "title": "Replace washer",
                "description": "Follow-up on the leak",
                "issueId": issue["id"],
                "assignedToId": technician.id,
                "estimatedCost": "45.50",
                "scheduledDate": "2024-06-03T09:00:00Z",
            },
            headers=as_user(manager_user),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["operatorPeriodId"] == first_period
        assert data["issueId"] == issue["id"]
        assert data["assignedToId"] == technician.id

        refetched_issue = client.get(f"/api/issues/{issue['id']}", headers=as_user(tenant_user))
        assert refetched_issue.json()["operatorPeriodId"] == first_period

        fetched = client.get(f"/api/work-orders/{data['id']}", headers=as_user(manager_user))
        assert fetched.status_code == 200
        assert fetched.json()["operatorPeriodId"] == first_period

    def test_tenant_cannot_dispatch(self, client, managed_building, tenant_user):
        response = client.post(
            "/api/work-orders",
            json={
                "buildingId": managed_building.id,
                "title": "Repaint lobby",
                "description": "Scheduled maintenance",
            },
            headers=as_user(tenant_user),
        )
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "AUTH_ERROR"

    def test_negative_cost_is_400(self, client, managed_building, manager_user):
        response = client.post(
            "/api/work-orders",
            json={
                "buildingId": managed_building.id,
                "title": "Repaint lobby",
                "description": "Scheduled maintenance",
                "estimatedCost": -5,
            },
            headers=as_user(manager_user),
        )
        assert response.status_code == 400
        assert response.json()["error"]["details"]

    def test_unknown_building_is_404(self, client, manager_user):
        response = client.post(
            "/api/work-orders",
            json={"buildingId": 404, "title": "Repaint", "description": "Lobby"},
            headers=as_user(manager_user),
        )
        assert response.status_code == 404
