import pytest
from decimal import Decimal

from dealerops.core.enums import VehicleStatus
from dealerops.core.security import create_access_token

pytestmark = pytest.mark.integration


def _vin(n: int) -> str:
    return f"2T1BURHE0JC{n:06d}"


async def _post_sale(test_client, headers, customer_id, vehicle_id, **extra):
    data = {"customer_id": customer_id, "vehicle_id": vehicle_id, "sale_price": "20000.00"}
    data.update(extra)
    return await test_client.post("/sales/", json=data, headers=headers)


class TestMonitoring:

    @pytest.mark.asyncio
    async def test_health_endpoint(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "DealerOps"

    @pytest.mark.asyncio
    async def test_metrics_endpoint(self, test_client):
        await test_client.get("/health")
        response = await test_client.get("/metrics")
        assert response.status_code == 200
        assert "http_requests_total" in response.text

    @pytest.mark.asyncio
    async def test_root(self, test_client):
        response = await test_client.get("/")
        assert response.json()["docs"] == "/docs"


@pytest.mark.auth
class TestAuthentication:

    @pytest.mark.asyncio
    async def test_register_creates_salesperson(self, test_client):
        response = await test_client.post(
            "/auth/register",
            json={"username": "newbie", "password": "hunter22", "name": "New Person"},
        )
        assert response.status_code == 200
        token = response.json()["access_token"]

        me = await test_client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["role"] == "salesperson"

    @pytest.mark.asyncio
    async def test_duplicate_username(self, test_client, users):
        response = await test_client.post(
            "/auth/register",
            json={"username": "salesperson", "password": "hunter22"},
        )
        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    @pytest.mark.asyncio
    async def test_short_password(self, test_client):
        response = await test_client.post("/auth/register", json={"username": "x", "password": "123"})
        assert response.status_code == 400
        assert response.json()["error"] == "validation"

    @pytest.mark.asyncio
    async def test_login(self, test_client, users):
        response = await test_client.post(
            "/auth/login",
            data={"username": "manager", "password": "secret123"},
        )
        assert response.status_code == 200
        assert response.json()["token_type"] == "bearer"

    @pytest.mark.asyncio
    async def test_login_bad_password(self, test_client, users):
        response = await test_client.post(
            "/auth/login",
            data={"username": "manager", "password": "wrong-password"},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_token_denied(self, test_client):
        response = await test_client.get("/sales/")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_expired_token_denied(self, test_client, users):
        token = create_access_token(str(users["admin"].id), users["admin"].role, expires_minutes=-5)
        response = await test_client.get("/sales/", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_stale_role_denied(self, test_client, users):
        token = create_access_token(str(users["salesperson"].id), "admin")
        response = await test_client.get("/sales/", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token_denied(self, test_client):
        response = await test_client.get("/sales/", headers={"Authorization": "Bearer invalid_token"})
        assert response.status_code == 401


class TestSalesEndpoints:

    @pytest.mark.asyncio
    async def test_create_sale_reserves_vehicle(
        self, test_client, salesperson_headers, create_customer_factory, create_vehicle_factory
    ):
        customer = await create_customer_factory()
        vehicle = await create_vehicle_factory()

        response = await _post_sale(test_client, salesperson_headers, customer.id, vehicle.id)
        assert response.status_code == 201
        data = response.json()
        assert data["sale_status"] == "pending"
        assert data["vehicle_id"] == vehicle.id
        assert Decimal(data["sale_price"]) == Decimal("20000")

        vehicle_response = await test_client.get(f"/vehicles/{vehicle.id}", headers=salesperson_headers)
        assert vehicle_response.json()["status"] == "reserved"

    @pytest.mark.asyncio
    async def test_unavailable_vehicle_is_conflict(
        self, test_client, salesperson_headers, create_customer_factory, create_vehicle_factory
    ):
        customer = await create_customer_factory()
        vehicle = await create_vehicle_factory()
        await _post_sale(test_client, salesperson_headers, customer.id, vehicle.id)

        response = await _post_sale(test_client, salesperson_headers, customer.id, vehicle.id)
        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

        listing = await test_client.get("/sales/", headers=salesperson_headers)
        assert len(listing.json()) == 1

    @pytest.mark.asyncio
    async def test_missing_fields(self, test_client, salesperson_headers, create_customer_factory):
        customer = await create_customer_factory()
        response = await test_client.post(
            "/sales/", json={"customer_id": customer.id}, headers=salesperson_headers
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation"
        assert "Missing required fields" in body["detail"]

    @pytest.mark.asyncio
    async def test_unknown_vehicle(self, test_client, salesperson_headers, create_customer_factory):
        customer = await create_customer_factory()
        response = await _post_sale(test_client, salesperson_headers, customer.id, 777)
        assert response.status_code == 404
        assert response.json() == {"error": "not_found", "detail": "Vehicle with id 777 not found"}

    @pytest.mark.asyncio
    async def test_service_role_cannot_access_sales(self, test_client, service_headers):
        response = await test_client.get("/sales/", headers=service_headers)
        assert response.status_code == 403
        assert response.json()["error"] == "permission"

    @pytest.mark.asyncio
    async def test_salesperson_sees_only_own_sales(
        self, test_client, users, headers_for, salesperson_headers, create_customer_factory, create_vehicle_factory
    ):
        customer = await create_customer_factory()
        vehicle = await create_vehicle_factory()
        created = await _post_sale(test_client, salesperson_headers, customer.id, vehicle.id)
        sale_id = created.json()["id"]

        other_headers = headers_for(users["salesperson_2"])
        assert (await test_client.get("/sales/", headers=other_headers)).json() == []
        response = await test_client.get(f"/sales/{sale_id}", headers=other_headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_delete_requires_manager(
        self, test_client, salesperson_headers, finance_headers, manager_headers,
        create_customer_factory, create_vehicle_factory
    ):
        customer = await create_customer_factory()
        vehicle = await create_vehicle_factory()
        sale_id = (await _post_sale(test_client, salesperson_headers, customer.id, vehicle.id)).json()["id"]

        for headers in (salesperson_headers, finance_headers):
            response = await test_client.delete(f"/sales/{sale_id}", headers=headers)
            assert response.status_code == 403

        response = await test_client.delete(f"/sales/{sale_id}", headers=manager_headers)
        assert response.status_code == 200
        assert response.json()["released_vehicle_id"] == vehicle.id

        vehicle_response = await test_client.get(f"/vehicles/{vehicle.id}", headers=manager_headers)
        assert vehicle_response.json()["status"] == "available"

        again = await test_client.delete(f"/sales/{sale_id}", headers=manager_headers)
        assert again.status_code == 404

    @pytest.mark.asyncio
    async def test_status_progression(
        self, test_client, salesperson_headers, create_customer_factory, create_vehicle_factory
    ):
        customer = await create_customer_factory()
        vehicle = await create_vehicle_factory()
        sale_id = (await _post_sale(test_client, salesperson_headers, customer.id, vehicle.id)).json()["id"]

        response = await test_client.put(
            f"/sales/{sale_id}", json={"sale_status": "delivered"}, headers=salesperson_headers
        )
        assert response.status_code == 200
        assert response.json()["sale_status"] == "delivered"

        vehicle_response = await test_client.get(f"/vehicles/{vehicle.id}", headers=salesperson_headers)
        assert vehicle_response.json()["status"] == "sold"

        backwards = await test_client.put(
            f"/sales/{sale_id}", json={"sale_status": "pending"}, headers=salesperson_headers
        )
        assert backwards.status_code == 409

        unknown = await test_client.put(
            f"/sales/{sale_id}", json={"sale_status": "shipped"}, headers=salesperson_headers
        )
        assert unknown.status_code == 400


class TestLeadConversion:

    async def _create_lead(self, test_client, headers, **extra):
        data = {
            "lead_source": "walk-in",
            "contact_name": "Robin Lee",
            "contact_phone": "555-0111",
            "contact_email": "robin@example.com",
        }
        data.update(extra)
        return await test_client.post("/leads/", json=data, headers=headers)

    @pytest.mark.asyncio
    async def test_convert(self, test_client, salesperson_headers):
        lead = (await self._create_lead(test_client, salesperson_headers)).json()
        assert lead["lead_status"] == "new"

        response = await test_client.post(f"/leads/{lead['id']}/convert", headers=salesperson_headers)
        assert response.status_code == 200
        result = response.json()

        sale = await test_client.get(f"/sales/{result['sale_id']}", headers=salesperson_headers)
        assert sale.json()["vehicle_id"] is None
        assert sale.json()["customer_id"] == result["customer_id"]

        customer = await test_client.get(f"/customers/{result['customer_id']}", headers=salesperson_headers)
        assert customer.json()["lead_id"] == lead["id"]

        updated = await test_client.get(f"/leads/{lead['id']}", headers=salesperson_headers)
        assert updated.json()["lead_status"] == "won"

        again = await test_client.post(f"/leads/{lead['id']}/convert", headers=salesperson_headers)
        assert again.status_code == 409

    @pytest.mark.asyncio
    async def test_status_is_case_insensitive(self, test_client, salesperson_headers):
        response = await self._create_lead(test_client, salesperson_headers, lead_status="Qualified")
        assert response.status_code == 201
        assert response.json()["lead_status"] == "qualified"

    @pytest.mark.asyncio
    async def test_manual_win_rejected(self, test_client, salesperson_headers):
        response = await self._create_lead(test_client, salesperson_headers, lead_status="won")
        assert response.status_code == 400

        lead = (await self._create_lead(test_client, salesperson_headers)).json()
        response = await test_client.put(
            f"/leads/{lead['id']}", json={"lead_status": "won"}, headers=salesperson_headers
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_status_rejected(self, test_client, salesperson_headers):
        response = await self._create_lead(test_client, salesperson_headers, lead_status="archived")
        assert response.status_code == 400
        assert response.json()["error"] == "validation"

    @pytest.mark.asyncio
    async def test_finance_cannot_convert(self, test_client, salesperson_headers, finance_headers):
        lead = (await self._create_lead(test_client, salesperson_headers)).json()
        response = await test_client.post(f"/leads/{lead['id']}/convert", headers=finance_headers)
        assert response.status_code == 403


class TestVehicleEndpoints:

    def _payload(self, n=1, **extra):
        data = {"vin": _vin(n), "make": "Toyota", "model": "Corolla", "year": 2021, "price": "18500.00"}
        data.update(extra)
        return data

    @pytest.mark.asyncio
    async def test_create_vehicle(self, test_client, manager_headers):
        response = await test_client.post("/vehicles/", json=self._payload(status="sold"), headers=manager_headers)
        assert response.status_code == 201
        assert response.json()["status"] == "available"

    @pytest.mark.asyncio
    async def test_invalid_vin(self, test_client, manager_headers):
        response = await test_client.post(
            "/vehicles/", json=self._payload(vin="2T1BURHE0JC12345"), headers=manager_headers
        )
        assert response.status_code == 400

        response = await test_client.post(
            "/vehicles/", json=self._payload(vin="2T1BURHE0JC12345I"), headers=manager_headers
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_duplicate_vin(self, test_client, manager_headers):
        await test_client.post("/vehicles/", json=self._payload(), headers=manager_headers)
        response = await test_client.post("/vehicles/", json=self._payload(), headers=manager_headers)
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_status_locked_while_sale_exists(
        self, test_client, salesperson_headers, create_customer_factory, create_vehicle_factory
    ):
        customer = await create_customer_factory()
        vehicle = await create_vehicle_factory()
        await _post_sale(test_client, salesperson_headers, customer.id, vehicle.id)

        response = await test_client.put(
            f"/vehicles/{vehicle.id}", json={"status": "available"}, headers=salesperson_headers
        )
        assert response.status_code == 409

        details = await test_client.put(
            f"/vehicles/{vehicle.id}", json={"color": "Red"}, headers=salesperson_headers
        )
        assert details.status_code == 200
        assert details.json()["status"] == "reserved"

        delete = await test_client.delete(f"/vehicles/{vehicle.id}", headers=salesperson_headers)
        assert delete.status_code == 409

    @pytest.mark.asyncio
    async def test_status_cannot_be_held_without_sale(self, test_client, manager_headers, create_vehicle_factory):
        vehicle = await create_vehicle_factory()
        for status in ("Reserved", "sold"):
            response = await test_client.put(
                f"/vehicles/{vehicle.id}", json={"status": status}, headers=manager_headers
            )
            assert response.status_code == 409
            assert response.json()["error"] == "conflict"

        stored = await test_client.get(f"/vehicles/{vehicle.id}", headers=manager_headers)
        assert stored.json()["status"] == "available"

    @pytest.mark.asyncio
    async def test_stray_status_reset_to_available(
        self, test_client, manager_headers, salesperson_headers, create_vehicle_factory, create_customer_factory
    ):
        vehicle = await create_vehicle_factory(status=VehicleStatus.RESERVED)
        response = await test_client.put(
            f"/vehicles/{vehicle.id}", json={"status": "Available"}, headers=manager_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "available"

        customer = await create_customer_factory()
        sale = await _post_sale(test_client, salesperson_headers, customer.id, vehicle.id)
        assert sale.status_code == 201


@pytest.mark.commission
class TestCommissionEndpoints:

    @pytest.mark.asyncio
    async def test_commission_over_completed_sales(
        self, test_client, users, salesperson_headers, manager_headers,
        create_customer_factory, create_vehicle_factory
    ):
        customer = await create_customer_factory()
        vehicle = await create_vehicle_factory()
        sale = await _post_sale(
            test_client, salesperson_headers, customer.id, vehicle.id, trade_in_value="5000"
        )
        sale_id = sale.json()["id"]

        # pending sales do not count
        pending = await test_client.get("/commissions/me", headers=salesperson_headers)
        assert pending.json()["completed_sales"] == 0

        await test_client.put(f"/sales/{sale_id}", json={"sale_status": "completed"}, headers=salesperson_headers)

        response = await test_client.get("/commissions/me", headers=salesperson_headers)
        data = response.json()
        assert data["completed_sales"] == 1
        assert Decimal(data["total_commission"]) == Decimal("750.00")
        assert data["formatted_commission"] == "$750.00"
        assert data["tier"]["tier"] == "bronze"

        other = await test_client.get(f"/commissions/{users['salesperson'].id}", headers=manager_headers)
        assert other.status_code == 200
        assert other.json()["formatted_commission"] == "$750.00"

    @pytest.mark.asyncio
    async def test_salesperson_cannot_view_others(self, test_client, users, salesperson_headers):
        response = await test_client.get(f"/commissions/{users['manager'].id}", headers=salesperson_headers)
        assert response.status_code == 403


class TestUsers:

    @pytest.mark.asyncio
    async def test_update_self(self, test_client, users, salesperson_headers):
        response = await test_client.put(
            f"/users/{users['salesperson'].id}", json={"phone": "555-0123"}, headers=salesperson_headers
        )
        assert response.status_code == 200
        assert response.json()["phone"] == "555-0123"

    @pytest.mark.asyncio
    async def test_cannot_update_other_user(self, test_client, users, manager_headers, admin_headers):
        target = users["salesperson"].id
        response = await test_client.put(f"/users/{target}", json={"name": "X"}, headers=manager_headers)
        assert response.status_code == 403

        response = await test_client.put(f"/users/{target}", json={"name": "X"}, headers=admin_headers)
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_list_users_requires_user_management(self, test_client, users, manager_headers, finance_headers):
        response = await test_client.get("/users/?role=salesperson", headers=manager_headers)
        assert response.status_code == 200
        assert [u["username"] for u in response.json()] == ["salesperson", "salesperson_2"]

        response = await test_client.get("/users/", headers=finance_headers)
        assert response.status_code == 403
