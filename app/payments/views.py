"""
Views for the billing API.

URL Structure:
    /api/v1/billing/create-payment-intent/      POST  (JWT)
    /api/v1/billing/confirm-payment/            POST  (JWT)
    /api/v1/billing/process-withdrawal/         POST  (JWT)
    /api/v1/billing/update-payout-schedule/     POST  (JWT)
    /api/v1/billing/stripe-connect-onboard/     POST  (JWT)
    /api/v1/billing/launch-promotion/claim/     POST  (JWT)
    /api/v1/billing/video-dates/<id>/start/     POST  (JWT)
    /api/v1/billing/video-dates/<id>/extend/    POST  (JWT)
    /api/v1/billing/video-dates/<id>/complete/  POST  (JWT)
    /api/v1/billing/video-dates/<id>/cancel/    POST  (JWT)
    /api/v1/billing/process-message-refunds/    POST  (service role key)
    /api/v1/billing/process-pending-earnings/   POST  (x-cron-secret)

Design Decisions:
    - User endpoints are APIViews; services validate and return
      ServiceResults, failures are rendered as {error, error_code}
    - Sweep triggers are plain function views authenticated by shared
      secrets, never by user sessions
    - Sweep triggers never expose internal error detail
"""

from __future__ import annotations

import logging

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from payments.auth import cron_secret_configured, has_cron_secret, has_service_role
from payments.serializers import (
    ConfirmPaymentResponseSerializer,
    ConfirmPaymentSerializer,
    ConnectOnboardingResponseSerializer,
    CreatePaymentIntentSerializer,
    ExtendVideoDateSerializer,
    LaunchPromotionResponseSerializer,
    PaymentIntentResponseSerializer,
    PayoutScheduleResponseSerializer,
    ProcessWithdrawalSerializer,
    UpdatePayoutScheduleSerializer,
    VideoDateExtensionResponseSerializer,
    VideoDateSettlementResponseSerializer,
    WithdrawalResponseSerializer,
)
from payments.services import (
    ConnectOnboardingService,
    CreditPurchaseService,
    LaunchPromotionService,
    PayoutScheduleService,
    VideoDateBillingService,
    WithdrawalService,
)
from payments.workers import EarningsMaturation, RefundSweep

logger = logging.getLogger(__name__)


def _result_response(result) -> Response:
    if not result.success:
        return Response(result.to_response(), status=result.status_code)
    return Response(result.data, status=status.HTTP_200_OK)


# =============================================================================
# Credit Purchase Views
# =============================================================================


class CreatePaymentIntentView(APIView):
    """
    Open a Stripe PaymentIntent for a credit package.

    POST /api/v1/billing/create-payment-intent/

    Payload:
        packageId: starter | popular | premium | vip

    The price and credit amount come from the server-side package
    table; the client only names the package.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="create_payment_intent",
        summary="Create a payment intent for a credit package",
        request=CreatePaymentIntentSerializer,
        responses={
            200: PaymentIntentResponseSerializer,
            400: OpenApiResponse(description="Invalid package"),
            503: OpenApiResponse(description="Payment system not configured"),
        },
        tags=["Billing - Credits"],
    )
    def post(self, request):
        serializer = CreatePaymentIntentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = CreditPurchaseService.create_payment_intent(
            request.user, serializer.validated_data.get("packageId")
        )
        return _result_response(result)


class ConfirmPaymentView(APIView):
    """
    Credit the caller's wallet for a succeeded PaymentIntent.

    POST /api/v1/billing/confirm-payment/

    Safe to call more than once and safe to race with the
    payment_intent.succeeded webhook: the purchase is credited once.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="confirm_payment",
        summary="Confirm a credit purchase",
        request=ConfirmPaymentSerializer,
        responses={
            200: ConfirmPaymentResponseSerializer,
            400: OpenApiResponse(description="Invalid id or payment not succeeded"),
            403: OpenApiResponse(description="Payment belongs to another user"),
        },
        tags=["Billing - Credits"],
    )
    def post(self, request):
        serializer = ConfirmPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = CreditPurchaseService.confirm_payment(
            request.user, serializer.validated_data.get("paymentIntentId")
        )
        return _result_response(result)


# =============================================================================
# Payout Views
# =============================================================================


class ProcessWithdrawalView(APIView):
    """
    Withdraw available earnings to the caller's connected account.

    POST /api/v1/billing/process-withdrawal/

    Payload:
        amount: USD amount, 20 to 10,000 (rounded half-up to cents)
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="process_withdrawal",
        summary="Withdraw available earnings",
        request=ProcessWithdrawalSerializer,
        responses={
            200: WithdrawalResponseSerializer,
            400: OpenApiResponse(description="Invalid amount, account not ready or insufficient balance"),
            502: OpenApiResponse(description="Stripe transfer failed"),
            503: OpenApiResponse(description="Payment system not configured"),
        },
        tags=["Billing - Payouts"],
    )
    def post(self, request):
        serializer = ProcessWithdrawalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = WithdrawalService.process_withdrawal(
            request.user, serializer.validated_data.get("amount")
        )
        return _result_response(result)


class UpdatePayoutScheduleView(APIView):
    """
    Apply the platform payout schedule to connected accounts.

    POST /api/v1/billing/update-payout-schedule/

    Payload:
        accountId: Account to update (optional, defaults to the caller's)
        updateAll: Update every account (admin only)
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="update_payout_schedule",
        summary="Update Stripe payout schedules",
        request=UpdatePayoutScheduleSerializer,
        responses={
            200: PayoutScheduleResponseSerializer,
            400: OpenApiResponse(description="No Stripe account found"),
            403: OpenApiResponse(description="Not the account owner or not admin"),
        },
        tags=["Billing - Payouts"],
    )
    def post(self, request):
        serializer = UpdatePayoutScheduleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if data.get("updateAll"):
            result = PayoutScheduleService.update_all(request.user)
        else:
            result = PayoutScheduleService.update_schedule(
                request.user, account_id=data.get("accountId") or None
            )
        return _result_response(result)


class StripeConnectOnboardView(APIView):
    """
    Start or resume Stripe Connect onboarding for the caller.

    POST /api/v1/billing/stripe-connect-onboard/

    Opens an Express account on first use. Returns onboardingUrl until
    Stripe reports the account ready for payouts. The Origin header picks
    the return page when it is an allowed origin.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="stripe_connect_onboard",
        summary="Start Stripe Connect onboarding",
        request=None,
        responses={
            200: ConnectOnboardingResponseSerializer,
            502: OpenApiResponse(description="Stripe call failed"),
            503: OpenApiResponse(description="Payment system not configured"),
        },
        tags=["Billing - Payouts"],
    )
    def post(self, request):
        result = ConnectOnboardingService.start_onboarding(
            request.user, origin=request.headers.get("Origin")
        )
        return _result_response(result)


# =============================================================================
# Video Date Views
# =============================================================================


class StartVideoDateView(APIView):
    """
    Mark a video date as connected.

    POST /api/v1/billing/video-dates/<id>/start/

    Either participant may call it; billing time runs from the first call.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="start_video_date",
        summary="Mark a video date as connected",
        request=None,
        responses={
            200: OpenApiResponse(description="{success, status, actualStart}"),
            400: OpenApiResponse(description="Video date already closed"),
            404: OpenApiResponse(description="Video date not found"),
        },
        tags=["Billing - Video Dates"],
    )
    def post(self, request, video_date_id):
        return _result_response(VideoDateBillingService.start(request.user, video_date_id))


class ExtendVideoDateView(APIView):
    """
    Buy more minutes for an open video date.

    POST /api/v1/billing/video-dates/<id>/extend/

    Payload:
        minutes: 15 or 30
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="extend_video_date",
        summary="Extend a video date",
        request=ExtendVideoDateSerializer,
        responses={
            200: VideoDateExtensionResponseSerializer,
            400: OpenApiResponse(description="Invalid minutes, closed date or insufficient credits"),
            403: OpenApiResponse(description="Caller is not the seeker"),
            404: OpenApiResponse(description="Video date not found"),
        },
        tags=["Billing - Video Dates"],
    )
    def post(self, request, video_date_id):
        serializer = ExtendVideoDateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = VideoDateBillingService.extend(
            request.user, video_date_id, serializer.validated_data.get("minutes")
        )
        return _result_response(result)


class CompleteVideoDateView(APIView):
    """
    Settle a video date on the minutes used.

    POST /api/v1/billing/video-dates/<id>/complete/

    Safe to call from both participants; only the first call moves money.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="complete_video_date",
        summary="Settle a video date",
        request=None,
        responses={
            200: VideoDateSettlementResponseSerializer,
            404: OpenApiResponse(description="Video date not found"),
        },
        tags=["Billing - Video Dates"],
    )
    def post(self, request, video_date_id):
        return _result_response(VideoDateBillingService.complete(request.user, video_date_id))


class CancelVideoDateView(APIView):
    """
    Cancel a video date that has not started and refund its credits.

    POST /api/v1/billing/video-dates/<id>/cancel/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="cancel_video_date",
        summary="Cancel a video date",
        request=None,
        responses={
            200: VideoDateSettlementResponseSerializer,
            400: OpenApiResponse(description="Video date already started or closed"),
            404: OpenApiResponse(description="Video date not found"),
        },
        tags=["Billing - Video Dates"],
    )
    def post(self, request, video_date_id):
        return _result_response(VideoDateBillingService.cancel(request.user, video_date_id))


# =============================================================================
# Promotion Views
# =============================================================================


class ClaimLaunchPromotionView(APIView):
    """
    Claim the launch promotion for the caller's role.

    POST /api/v1/billing/launch-promotion/claim/

    Seekers get bonus credits, earners a featured period. Sold out and
    already claimed are answered with 200 and {success: false, reason}.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="claim_launch_promotion",
        summary="Claim the launch promotion",
        request=None,
        responses={200: LaunchPromotionResponseSerializer},
        tags=["Billing - Promotions"],
    )
    def post(self, request):
        return _result_response(LaunchPromotionService.claim(request.user))


# =============================================================================
# Sweep Triggers
# =============================================================================


@csrf_exempt
@require_POST
def process_message_refunds_view(request: HttpRequest) -> JsonResponse:
    """
    Run the refund sweep now.

    Requires "Authorization: Bearer <SERVICE_ROLE_KEY>".

    Returns:
        200 {success, processed}, 401 on auth mismatch, 500 on
        infrastructure errors
    """
    if not has_service_role(request):
        logger.warning("Refund sweep trigger rejected: invalid service credentials")
        return JsonResponse({"success": False, "error": "Unauthorized"}, status=401)

    try:
        result = RefundSweep.run()
    except Exception:
        logger.error("Refund sweep trigger failed", exc_info=True)
        return JsonResponse({"success": False, "error": "Internal server error"}, status=500)

    return JsonResponse({"success": True, "processed": result.processed})


@csrf_exempt
@require_POST
def process_pending_earnings_view(request: HttpRequest) -> JsonResponse:
    """
    Run the earnings maturation sweep now.

    Requires the "x-cron-secret" header to match CRON_SECRET.

    Returns:
        200 {success, processed, message}, 403 on secret mismatch, 500
        when CRON_SECRET is unset or on infrastructure errors
    """
    if not cron_secret_configured():
        logger.error("Earnings maturation trigger called but CRON_SECRET is not set")
        return JsonResponse({"success": False, "error": "Server misconfigured"}, status=500)

    if not has_cron_secret(request):
        logger.warning("Earnings maturation trigger rejected: invalid cron secret")
        return JsonResponse({"success": False, "error": "Forbidden"}, status=403)

    try:
        processed = EarningsMaturation.run()
    except Exception:
        logger.error("Earnings maturation trigger failed", exc_info=True)
        return JsonResponse({"success": False, "error": "Internal server error"}, status=500)

    return JsonResponse(
        {
            "success": True,
            "processed": processed,
            "message": f"Processed {processed} pending earnings",
        }
    )
