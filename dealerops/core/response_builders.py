from dealerops.models.customer import Customer
from dealerops.models.lead import Lead
from dealerops.models.sale import Sale
from dealerops.models.trade_in import TradeIn
from dealerops.models.user import User
from dealerops.models.vehicle import Vehicle
from dealerops.schemas.customer import CustomerOut
from dealerops.schemas.lead import LeadOut
from dealerops.schemas.sale import SaleOut
from dealerops.schemas.trade_in import TradeInOut
from dealerops.schemas.user import UserOut
from dealerops.schemas.vehicle import VehicleOut


def build_lead_response(lead: Lead) -> LeadOut:
    return LeadOut(
        id=lead.id,
        lead_source=lead.lead_source,
        lead_status=lead.lead_status,
        contact_name=lead.contact_name,
        contact_phone=lead.contact_phone,
        contact_email=lead.contact_email,
        vehicle_interested=lead.vehicle_interested,
        inquiry_date=lead.inquiry_date,
        follow_up_date=lead.follow_up_date,
        estimated_value=lead.estimated_value,
        notes=lead.notes,
        assigned_to=lead.assigned_to,
        created_at=lead.created_at,
        updated_at=lead.updated_at,
    )


def build_sale_response(sale: Sale) -> SaleOut:
    return SaleOut(
        id=sale.id,
        customer_id=sale.customer_id,
        vehicle_id=sale.vehicle_id,
        salesperson_id=sale.salesperson_id,
        sale_date=sale.sale_date,
        sale_price=sale.sale_price,
        financing_type=sale.financing_type,
        trade_in_value=sale.trade_in_value,
        warranty_package=sale.warranty_package,
        delivery_date=sale.delivery_date,
        sale_status=sale.sale_status,
        created_at=sale.created_at,
        updated_at=sale.updated_at,
    )


def build_customer_response(customer: Customer) -> CustomerOut:
    return CustomerOut(
        id=customer.id,
        name=customer.name,
        email=customer.email,
        phone=customer.phone,
        address=customer.address,
        lead_id=customer.lead_id,
        created_at=customer.created_at,
        updated_at=customer.updated_at,
    )


def build_vehicle_response(vehicle: Vehicle) -> VehicleOut:
    return VehicleOut(
        id=vehicle.id,
        vin=vehicle.vin,
        make=vehicle.make,
        model=vehicle.model,
        year=vehicle.year,
        color=vehicle.color,
        price=vehicle.price,
        mileage=vehicle.mileage,
        status=vehicle.status,
        created_at=vehicle.created_at,
        updated_at=vehicle.updated_at,
    )


def build_trade_in_response(trade_in: TradeIn) -> TradeInOut:
    return TradeInOut(
        id=trade_in.id,
        vin=trade_in.vin,
        make=trade_in.make,
        model=trade_in.model,
        year=trade_in.year,
        mileage=trade_in.mileage,
        condition=trade_in.condition,
        appraised_value=trade_in.appraised_value,
        created_at=trade_in.created_at,
    )


def build_user_response(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        username=user.username,
        name=user.name,
        email=user.email,
        phone=user.phone,
        role=user.role,
    )


def build_lead_response_list(leads: list) -> list:
    return [build_lead_response(lead) for lead in leads]


def build_sale_response_list(sales: list) -> list:
    return [build_sale_response(sale) for sale in sales]


def build_customer_response_list(customers: list) -> list:
    return [build_customer_response(customer) for customer in customers]


def build_vehicle_response_list(vehicles: list) -> list:
    return [build_vehicle_response(vehicle) for vehicle in vehicles]


def build_trade_in_response_list(trade_ins: list) -> list:
    return [build_trade_in_response(trade_in) for trade_in in trade_ins]
