"""
Tests for PayoutScheduleService.
"""

from payments.exceptions import StripeInvalidAccountError
from payments.services import PayoutScheduleService
from payments.tests.factories import ConnectedAccountFactory

WEEKLY_FRIDAY = {"interval": "weekly", "weekly_anchor": "friday", "delay_days": 2}


class TestUpdateSchedule:
    def test_defaults_to_callers_account(self, connected_account, mock_stripe):
        result = PayoutScheduleService.update_schedule(connected_account.user)

        assert result.data == {
            "success": True,
            "accountId": connected_account.stripe_account_id,
            "schedule": WEEKLY_FRIDAY,
        }
        mock_stripe.update_payout_schedule.assert_called_once_with(
            connected_account.stripe_account_id, WEEKLY_FRIDAY
        )

    def test_no_account(self, earner, mock_stripe):
        result = PayoutScheduleService.update_schedule(earner)

        assert result.error == "No Stripe account found"

    def test_admin_may_update_any_account(self, admin_user, connected_account, mock_stripe):
        result = PayoutScheduleService.update_schedule(
            admin_user, account_id=connected_account.stripe_account_id
        )

        assert result.success

    def test_non_owner_is_forbidden(self, earner, connected_account, mock_stripe):
        result = PayoutScheduleService.update_schedule(
            earner, account_id=connected_account.stripe_account_id
        )

        assert result.status_code == 403
        mock_stripe.update_payout_schedule.assert_not_called()


class TestUpdateAll:
    def test_collects_per_account_errors(self, admin_user, mock_stripe):
        ok, broken = ConnectedAccountFactory.create_batch(2)

        def update(account_id, schedule):
            if account_id == broken.stripe_account_id:
                raise StripeInvalidAccountError("No such account")
            return {}

        mock_stripe.update_payout_schedule.side_effect = update

        result = PayoutScheduleService.update_all(admin_user)

        assert result.data == {
            "success": True,
            "results": {
                "updated": 1,
                "failed": 1,
                "errors": [f"{broken.stripe_account_id}: No such account"],
            },
        }

    def test_requires_admin(self, earner, mock_stripe):
        result = PayoutScheduleService.update_all(earner)

        assert result.error == "Admin access required"
        assert result.status_code == 403
