"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Leave domain errors to core.http.exception_handler
- Never contain business logic

Organization membership is checked upstream; these endpoints only require
a staff user, except validation, which is open to shoppers.
"""

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from promotions.domain import PromoCodeDraft, PromoCodePatch, PromotionDraft, PromotionPatch, ValidationRequest
from promotions.handlers.serializers import (
    DiscountQuoteSerializer,
    PromoCodeCreateSerializer,
    PromoCodeListingSerializer,
    PromoCodeListQuerySerializer,
    PromoCodePatchSerializer,
    PromoCodeSerializer,
    PromotionCreateSerializer,
    PromotionListQuerySerializer,
    PromotionPatchSerializer,
    PromotionSerializer,
    ValidatePromoCodeSerializer,
)
from promotions.services import build_promo_code_service, build_promotion_service


def _actor(request: Request) -> str:
    return str(request.user.pk)


def _tuples(data: dict, *names: str) -> dict:
    return {**data, **{name: tuple(data[name]) for name in names if name in data}}


class PromotionListView(APIView):
    """Handler for GET/POST /api/orgs/{org_id}/promotions"""

    permission_classes = [IsAdminUser]

    def get(self, request: Request, org_id: str) -> Response:
        query = PromotionListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        promotions = build_promotion_service().list_promotions(org_id, active=query.validated_data["active"])
        return Response(PromotionSerializer(promotions, many=True).data)

    def post(self, request: Request, org_id: str) -> Response:
        serializer = PromotionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        draft = PromotionDraft(**_tuples(serializer.validated_data, "event_ids", "ticket_type_ids"))
        promotion = build_promotion_service().create_promotion(org_id, draft, _actor(request))
        return Response(PromotionSerializer(promotion).data, status=status.HTTP_201_CREATED)


class PromotionDetailView(APIView):
    """Handler for GET/PATCH/DELETE /api/orgs/{org_id}/promotions/{promotion_id}"""

    permission_classes = [IsAdminUser]

    def get(self, request: Request, org_id: str, promotion_id: str) -> Response:
        promotion = build_promotion_service().get_promotion(promotion_id, org_id)
        return Response(PromotionSerializer(promotion).data)

    def patch(self, request: Request, org_id: str, promotion_id: str) -> Response:
        serializer = PromotionPatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        patch = PromotionPatch(**_tuples(serializer.validated_data, "event_ids", "ticket_type_ids"))
        promotion = build_promotion_service().update_promotion(promotion_id, org_id, patch, _actor(request))
        return Response(PromotionSerializer(promotion).data)

    def delete(self, request: Request, org_id: str, promotion_id: str) -> Response:
        build_promotion_service().delete_promotion(promotion_id, org_id, _actor(request))
        return Response(status=status.HTTP_204_NO_CONTENT)


class PromoCodeListView(APIView):
    """Handler for GET/POST /api/orgs/{org_id}/promo-codes"""

    permission_classes = [IsAdminUser]

    def get(self, request: Request, org_id: str) -> Response:
        query = PromoCodeListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        promotion_id = query.validated_data.get("promotion_id")
        listings = build_promo_code_service().list_promo_codes(
            org_id, str(promotion_id) if promotion_id else None
        )
        return Response(PromoCodeListingSerializer(listings, many=True).data)

    def post(self, request: Request, org_id: str) -> Response:
        serializer = PromoCodeCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        if data.get("promotion_id"):
            data["promotion_id"] = str(data["promotion_id"])
        promo_code = build_promo_code_service().create_promo_code(org_id, PromoCodeDraft(**data), _actor(request))
        return Response(PromoCodeSerializer(promo_code).data, status=status.HTTP_201_CREATED)


class PromoCodeDetailView(APIView):
    """Handler for GET/PATCH/DELETE /api/orgs/{org_id}/promo-codes/{promo_code_id}"""

    permission_classes = [IsAdminUser]

    def get(self, request: Request, org_id: str, promo_code_id: str) -> Response:
        promo_code = build_promo_code_service().get_promo_code(promo_code_id, org_id)
        return Response(PromoCodeSerializer(promo_code).data)

    def patch(self, request: Request, org_id: str, promo_code_id: str) -> Response:
        serializer = PromoCodePatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        promo_code = build_promo_code_service().update_promo_code(
            promo_code_id, org_id, PromoCodePatch(**serializer.validated_data), _actor(request)
        )
        return Response(PromoCodeSerializer(promo_code).data)

    def delete(self, request: Request, org_id: str, promo_code_id: str) -> Response:
        build_promo_code_service().delete_promo_code(promo_code_id, org_id, _actor(request))
        return Response(status=status.HTTP_204_NO_CONTENT)


class ValidatePromoCodeView(APIView):
    """Handler for POST /api/promo-codes/validate"""

    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        serializer = ValidatePromoCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user_id = str(request.user.pk) if request.user.is_authenticated else None
        quote = build_promo_code_service().validate_promo_code(
            ValidationRequest(user_id=user_id, **serializer.validated_data)
        )
        return Response(DiscountQuoteSerializer(quote).data)
