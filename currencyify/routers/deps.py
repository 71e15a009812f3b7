from fastapi import Request

from currencyify.services.container import RateServices
from currencyify.services.convert_service import ConvertService
from currencyify.services.exchange_rate_service import ExchangeRateService


def get_services(request: Request) -> RateServices:
    return request.app.state.rate_services


def get_convert_service(request: Request) -> ConvertService:
    return get_services(request).convert


def get_exchange_rate_service(request: Request) -> ExchangeRateService:
    return get_services(request).exchange_rate
