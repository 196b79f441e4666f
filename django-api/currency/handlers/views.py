"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Leave domain errors to core.http.exception_handler
- Never contain business logic
"""

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from currency.domain import ChangeContext, ConfigPatch
from currency.domain.registry import all_currencies
from currency.handlers.serializers import (
    AddExchangeRateSerializer,
    ConfigPatchSerializer,
    ConvertQuerySerializer,
    CurrencyChangeSerializer,
    CurrencyConfigSerializer,
    CurrencyInfoSerializer,
    ExchangeRateSerializer,
)
from currency.services import build_config_service, build_exchange_rate_service


def change_context(request: Request) -> ChangeContext:
    return ChangeContext(
        actor_id=str(request.user.pk),
        ip_address=request.META.get("REMOTE_ADDR"),
        user_agent=request.META.get("HTTP_USER_AGENT"),
    )


class AdminWritesMixin:
    """Reads are public; every other method requires a staff user."""

    def get_permissions(self):
        if self.request.method in ("GET", "HEAD", "OPTIONS"):
            return [AllowAny()]
        return [IsAdminUser()]


class CurrencyConfigView(AdminWritesMixin, APIView):
    """Handler for GET/PATCH /api/currency/config"""

    def get(self, request: Request) -> Response:
        config = build_config_service().get_config()
        return Response(CurrencyConfigSerializer(config).data)

    def patch(self, request: Request) -> Response:
        serializer = ConfigPatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        config = build_config_service().update_config(
            ConfigPatch(**serializer.validated_data), change_context(request)
        )
        return Response(CurrencyConfigSerializer(config).data)


class CurrencyListView(APIView):
    """Handler for GET /api/currency/currencies"""

    permission_classes = [AllowAny]

    def get(self, request: Request) -> Response:
        config = build_config_service().get_config()
        supported = {code.value for code in config.supported_currencies}
        currencies = [
            {**CurrencyInfoSerializer(info).data, "supported": info.code in supported}
            for info in all_currencies()
        ]
        return Response(
            {"currencies": currencies, "multi_currency_enabled": config.multi_currency_enabled}
        )


class ExchangeRateListView(AdminWritesMixin, APIView):
    """Handler for GET/POST /api/currency/rates"""

    def get(self, request: Request) -> Response:
        rates = build_exchange_rate_service().list_active_rates()
        return Response(ExchangeRateSerializer(rates, many=True).data)

    def post(self, request: Request) -> Response:
        serializer = AddExchangeRateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        rate = build_exchange_rate_service().add_rate(
            data["from_currency"],
            data["to_currency"],
            data["rate"],
            actor_id=str(request.user.pk),
            source=data["source"],
            provider=data.get("provider"),
            valid_from=data.get("valid_from"),
            valid_until=data.get("valid_until"),
        )
        return Response(ExchangeRateSerializer(rate).data, status=status.HTTP_201_CREATED)


class ConvertView(APIView):
    """Handler for GET /api/currency/convert?amount=&from=&to="""

    permission_classes = [AllowAny]

    def get(self, request: Request) -> Response:
        serializer = ConvertQuerySerializer(
            data={
                "amount": request.query_params.get("amount"),
                "from_currency": request.query_params.get("from"),
                "to_currency": request.query_params.get("to"),
            }
        )
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        converted = build_exchange_rate_service().convert(
            data["amount"], data["from_currency"], data["to_currency"]
        )
        return Response(
            {
                "amount": data["amount"],
                "from": data["from_currency"].upper(),
                "to": data["to_currency"].upper(),
                "converted_amount": converted,
            }
        )


class CurrencyHistoryView(APIView):
    """Handler for GET /api/currency/history"""

    permission_classes = [IsAdminUser]

    def get(self, request: Request) -> Response:
        changes = build_config_service().get_change_history()
        return Response(CurrencyChangeSerializer(changes, many=True).data)
