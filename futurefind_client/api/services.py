"""Thin endpoint groups built on ``AuthenticatedRequestClient.call``."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode, urlsplit

import aiohttp

from . import endpoints
from .request_client import AuthenticatedRequestClient


class APIGroup:
    def __init__(self, client: AuthenticatedRequestClient) -> None:
        self.client = client

    async def _call(self, endpoint: str, method: str = "GET", **kwargs: Any) -> Any:
        return await self.client.call(endpoint, method=method, **kwargs)


class AuthAPI(APIGroup):
    """Authentication and account endpoints."""

    async def login(self, email: str, password: str, provider: str = "email") -> Any:
        return await self._call(
            endpoints.LOGIN,
            "POST",
            json_body={"email": email, "password": password, "provider": provider},
        )

    async def signup(self, form: Mapping[str, str]) -> Any:
        return await self._call(endpoints.SIGNUP, "POST", json_body=dict(form))

    async def google_signup(self, id_token: str) -> Any:
        return await self._call(
            endpoints.LOGIN, "POST", json_body={"idToken": id_token, "provider": "google"}
        )

    async def apple_signup(self, code: str, full_name: str | None = None) -> Any:
        return await self._call(
            endpoints.LOGIN,
            "POST",
            json_body={"code": code, "fullName": full_name, "provider": "apple"},
        )

    async def send_fcm_token(self, token: str, timezone: str | None = None) -> Any:
        payload: dict[str, Any] = {"fcmToken": token}
        if timezone:
            payload["timezone"] = timezone
        return await self._call(endpoints.FCM_TOKEN, "POST", json_body=payload)

    async def send_notification(
        self, user_id: str, title: str, body: str, data: str = ""
    ) -> Any:
        return await self._call(
            endpoints.SEND_NOTIFICATION,
            "POST",
            json_body={"userId": user_id, "title": title, "body": body, "data": data},
        )

    async def logout(self) -> Any:
        return await self._call(endpoints.LOGOUT, "POST")

    async def delete_account(self) -> Any:
        return await self._call(endpoints.DELETE_ACCOUNT, "DELETE")

    async def forgot_password(self, email: str) -> Any:
        return await self._call(endpoints.FORGOT_PASSWORD, "POST", json_body={"email": email})

    async def verify_otp(self, otp: str, email: str) -> Any:
        return await self._call(
            endpoints.VERIFY_OTP, "POST", json_body={"otp": otp, "email": email}
        )

    async def reset_password(
        self, otp: str, email: str, new_password: str, confirm_password: str
    ) -> Any:
        return await self._call(
            endpoints.RESET_PASSWORD,
            "POST",
            json_body={
                "otp": otp,
                "email": email,
                "newPassword": new_password,
                "confirmPassword": confirm_password,
            },
        )

    async def check_password_status(self) -> Any:
        return await self._call(endpoints.CHECK_PASSWORD_STATUS)

    async def update_password(self, current_password: str, new_password: str) -> Any:
        return await self._call(
            endpoints.UPDATE_PASSWORD,
            "PATCH",
            json_body={"currentPassword": current_password, "newPassword": new_password},
        )

    async def refresh_token(self) -> Any:
        return await self._call(endpoints.REFRESH_TOKEN, "POST")


class OpportunitiesAPI(APIGroup):
    async def get_all(self, filters: Mapping[str, Any] | None = None) -> Any:
        filters = dict(filters or {})
        payload = {
            "limit": filters.get("limit") or 50,
            "page": filters.get("page") or 1,
            "sortBy": filters.get("sortBy") or "Featured",
            **filters,
        }
        return await self._call(endpoints.GET_ALL_OPPORTUNITIES, "POST", json_body=payload)

    async def get_categories(self) -> Any:
        return await self._call(endpoints.GET_CATEGORIES, "POST")

    async def get_by_id(self, opportunity_id: str) -> Any:
        return await self._call(endpoints.with_id(endpoints.GET_OPPORTUNITY_BY_ID, opportunity_id))

    async def get_featured(self, filters: Mapping[str, Any] | None = None) -> Any:
        payload = {"limit": 4, "page": 1, **dict(filters or {})}
        return await self._call(
            endpoints.GET_FEATURED_OPPORTUNITIES, "POST", json_body=payload
        )

    async def search(self, query: str, filters: Mapping[str, Any] | None = None) -> Any:
        path = f"{endpoints.SEARCH_OPPORTUNITIES}?{urlencode({'q': query})}"
        return await self._call(path, "POST", json_body=dict(filters or {}))

    async def unlock(self, opportunity_id: str) -> Any:
        # Backend expects { id }, not { opportunityId }
        return await self._call(
            endpoints.UNLOCK_OPPORTUNITY, "POST", json_body={"id": opportunity_id}
        )


class ApplicationsAPI(APIGroup):
    async def get_user_applications(
        self,
        filters: Mapping[str, Any] | None = None,
        limit: int = 50,
        page: int = 1,
        sort_by: str = "Featured",
    ) -> Any:
        payload = {**dict(filters or {}), "limit": limit, "page": page, "sortBy": sort_by}
        return await self._call(
            endpoints.GET_ALL_APPLICATIONS_WITH_FILTER, "POST", json_body=payload
        )

    async def get_by_id(self, application_id: str) -> Any:
        return await self._call(endpoints.with_id(endpoints.GET_APPLICATION_BY_ID, application_id))

    async def apply(self, opportunity_id: str, application_data: Mapping[str, Any] | None = None) -> Any:
        payload = {"opportunityId": opportunity_id, **dict(application_data or {})}
        return await self._call(endpoints.APPLY_TO_OPPORTUNITY, "POST", json_body=payload)

    async def get_stats(self) -> Any:
        return await self._call(endpoints.GET_APPLICATION_STATS)

    async def save(self, application_id: str) -> Any:
        return await self._call(endpoints.with_id(endpoints.SAVE_APPLICATION, application_id), "PATCH")

    async def remove_saved(self, application_id: str) -> Any:
        return await self._call(
            endpoints.with_id(endpoints.REMOVE_SAVED_APPLICATION, application_id), "PATCH"
        )

    async def update(self, application_id: str, opportunity: str, applicant: str, status: str) -> Any:
        return await self._call(
            endpoints.with_id(endpoints.UPDATE_APPLICATION, application_id),
            "PATCH",
            json_body={"opportunity": opportunity, "applicant": applicant, "status": status},
        )


class SavedAPI(APIGroup):
    async def get_saved(self, limit: int = 50, page: int = 1) -> Any:
        path = f"{endpoints.GET_SAVED_OPPORTUNITIES}?{urlencode({'limit': limit, 'page': page})}"
        return await self._call(path, "POST")

    async def save(self, opportunity_id: str) -> Any:
        return await self._call(endpoints.SAVE_OPPORTUNITY, "POST", json_body={"id": opportunity_id})

    async def remove(self, opportunity_id: str) -> Any:
        return await self._call(
            endpoints.REMOVE_SAVED_OPPORTUNITY, "POST", json_body={"id": opportunity_id}
        )


class UserAPI(APIGroup):
    async def get_profile(self) -> Any:
        return await self._call(endpoints.GET_PROFILE)

    async def update_profile(self, data: Mapping[str, Any]) -> Any:
        return await self._call(endpoints.UPDATE_PROFILE, "POST", json_body=dict(data))

    async def patch_profile(self, data: Mapping[str, Any]) -> Any:
        return await self._call(endpoints.UPDATE_PROFILE_PATCH, "PATCH", json_body=dict(data))

    async def update_profile_picture(
        self, image: bytes, filename: str = "profile.jpg", content_type: str = "image/jpeg"
    ) -> Any:
        """Upload a profile picture as multipart form data."""

        def build_form() -> aiohttp.FormData:
            form = aiohttp.FormData()
            form.add_field("avatarFile", image, filename=filename, content_type=content_type)
            return form

        return await self._call(endpoints.UPDATE_PROFILE_PATCH, "PATCH", body=build_form)

    async def update_interests(self, interests: list[str]) -> Any:
        return await self._call(endpoints.UPDATE_INTERESTS, "PATCH", json_body={"interests": interests})

    async def update_availability(self, availability: list[str]) -> Any:
        return await self._call(
            endpoints.UPDATE_AVAILABILITY, "PATCH", json_body={"availability": availability}
        )

    async def update_programs(self, programs: list[str]) -> Any:
        return await self._call(endpoints.UPDATE_PROGRAMS, "PATCH", json_body={"programs": programs})

    async def get_login_streak(self) -> Any:
        return await self._call(endpoints.GET_LOGIN_STREAK)

    async def update_login_data(self, day_percentage: float) -> Any:
        value = str(day_percentage)
        return await self._call(
            endpoints.UPDATE_LOGIN_DATA,
            "PATCH",
            json_body={
                "dayPercentageIncrement": value,
                "dayPercentage": value,
                "increment": value,
            },
        )

    async def update_location(self, location: Mapping[str, Any]) -> Any:
        return await self._call(endpoints.UPDATE_LOCATION, "PATCH", json_body=dict(location))


class UserDataAPI(APIGroup):
    async def get_opportunity_program_types(self) -> Any:
        return await self._call(endpoints.GET_OPPORTUNITY_PROGRAM_TYPES)

    async def get_enrollment_types(self) -> Any:
        return await self._call(endpoints.GET_ENROLLMENT_TYPES)

    async def get_grades(self) -> Any:
        return await self._call(endpoints.GET_GRADES)

    async def get_availability_seasons(self) -> Any:
        return await self._call(endpoints.GET_AVAILABILITY_SEASONS)

    async def get_opportunity_domains(self) -> Any:
        return await self._call(endpoints.GET_OPPORTUNITY_DOMAINS)

    async def get_goals(self) -> Any:
        return await self._call(endpoints.GET_GOALS)


class NotificationAPI(APIGroup):
    async def get_settings(self) -> Any:
        return await self._call(endpoints.NOTIFICATION_SETTINGS)

    async def update_settings(
        self, new_opportunities: bool, application_updates: bool, daily_streak_reminders: bool
    ) -> Any:
        return await self._call(
            endpoints.NOTIFICATION_SETTINGS,
            "PATCH",
            json_body={
                "newOpportunities": new_opportunities,
                "applicationUpdates": application_updates,
                "dailyStreakReminders": daily_streak_reminders,
            },
        )


class ReferralAPI(APIGroup):
    """Referral endpoints live at the server root, outside the API prefix."""

    def _referral_url(self) -> str:
        parts = urlsplit(self.client.base_url)
        return f"{parts.scheme}://{parts.netloc}{endpoints.CREATE_REFERRAL}"

    async def create_referral(
        self, owner_user_id: str, max_uses: str = "1", expires_in_days: str = "1"
    ) -> Any:
        return await self._call(
            self._referral_url(),
            "POST",
            json_body={
                "ownerUserId": owner_user_id,
                "maxUses": max_uses,
                "expiresInDays": expires_in_days,
            },
        )


class FutureFindAPI:
    """All endpoint groups sharing one authenticated client."""

    def __init__(self, client: AuthenticatedRequestClient) -> None:
        self.auth = AuthAPI(client)
        self.opportunities = OpportunitiesAPI(client)
        self.applications = ApplicationsAPI(client)
        self.saved = SavedAPI(client)
        self.user = UserAPI(client)
        self.user_data = UserDataAPI(client)
        self.notifications = NotificationAPI(client)
        self.referral = ReferralAPI(client)
