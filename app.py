"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import redis.asyncio as aioredis
import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings
from errors import register_error_handlers
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.http_client import HttpClient
from infrastructure.payments.razorpay import RazorpayGateway
from infrastructure.rate_limit import RateLimiter
from infrastructure.webhook.discord import DiscordWebhookProvider
from repositories.event_repository import EventRepository
from repositories.indexes import (
    EVENTS,
    INTERESTS,
    MESSAGES,
    NOTIFICATIONS,
    PAYMENTS,
    PROFILE_HISTORY,
    REPORTS,
    STORIES,
    USERS,
    VERIFICATION_TOKENS,
    ensure_indexes,
)
from repositories.interest_repository import InterestRepository
from repositories.message_repository import MessageRepository
from repositories.notification_repository import NotificationRepository
from repositories.payment_repository import PaymentRepository
from repositories.report_repository import ReportRepository
from repositories.story_repository import StoryRepository
from repositories.token_repository import OtpChallengeRepository
from repositories.user_repository import UserRepository
from routes.admin_routes import router as admin_router
from routes.auth_routes import router as auth_router
from routes.chat_routes import router as chat_router
from routes.event_routes import router as event_router
from routes.health_routes import router as health_router
from routes.interest_routes import router as interest_router
from routes.notification_routes import router as notification_router
from routes.payment_routes import router as payment_router
from routes.profile_routes import router as profile_router
from routes.report_routes import router as report_router
from routes.story_routes import router as story_router
from services.account_service import AccountService
from services.chat_service import ChatService, MessagingRelay
from services.event_service import EventService, EventStatusScheduler
from services.interest_service import InterestService
from services.moderation_service import ModerationService
from services.notification_service import NotificationService
from services.otp_service import OtpService
from services.payment_service import PaymentService
from services.report_service import ReportService
from services.story_service import StoryService
from services.subscription_service import SubscriptionService
from shared.logging import get_logger, setup_logging

log = get_logger(__name__)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(
        log_level=settings.logging.log_level,
        log_format=settings.logging.log_format,
        production=settings.is_production,
        sampling_rates={
            "presence_change": settings.logging.sample_rate_presence,
            "scheduler_tick": settings.logging.sample_rate_scheduler,
        },
    )

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(
            settings.db.mongodb_uri, tz_aware=True
        )
        db = mongo_client[settings.db.db_name]
        app.state.mongo_client = mongo_client
        app.state.db = db
        app.state.settings = settings

        # Redis is optional; without it rate-limit counters stay in process
        redis_client = None
        if settings.redis.redis_uri:
            redis_client = aioredis.from_url(
                settings.redis.redis_uri,
                encoding="utf-8",
                decode_responses=True,
            )
        app.state.redis = redis_client

        await ensure_indexes(db)

        # One HTTP client per external service
        razorpay_http = HttpClient(
            timeout=10.0,
            auth=(settings.razorpay.razorpay_key_id, settings.razorpay.razorpay_secret),
        )
        email_http = HttpClient(timeout=10.0)
        webhook_http = HttpClient(timeout=5.0)

        # ── Repositories ─────────────────────────────────────────────────────
        user_repo = UserRepository(db[USERS], db[PROFILE_HISTORY])
        challenge_repo = OtpChallengeRepository(db[VERIFICATION_TOKENS])
        payment_repo = PaymentRepository(db[PAYMENTS])
        interest_repo = InterestRepository(db[INTERESTS])
        message_repo = MessageRepository(db[MESSAGES])
        event_repo = EventRepository(db[EVENTS])
        report_repo = ReportRepository(db[REPORTS])
        notification_repo = NotificationRepository(db[NOTIFICATIONS])
        story_repo = StoryRepository(db[STORIES])

        # ── Services ─────────────────────────────────────────────────────────
        subscription_service = SubscriptionService(user_repo)
        otp_service = OtpService(challenge_repo, settings.jwt)
        email_provider = ZeptoMailProvider(
            settings.email, email_http, app_name=settings.app_name
        )
        relay = MessagingRelay(message_repo, user_repo)
        notification_service = NotificationService(notification_repo, user_repo)

        app.state.account_service = AccountService(
            user_repo, otp_service, email_provider, settings.jwt, settings.base_url
        )
        app.state.payment_service = PaymentService(
            payment_repo,
            user_repo,
            subscription_service,
            RazorpayGateway(settings.razorpay, razorpay_http),
            settings.razorpay,
        )
        app.state.interest_service = InterestService(
            interest_repo, user_repo, settings.base_url
        )
        app.state.relay = relay
        app.state.chat_service = ChatService(
            message_repo, user_repo, relay, settings.base_url
        )
        app.state.notification_service = notification_service
        app.state.event_service = EventService(event_repo, user_repo, notification_service)
        app.state.moderation_service = ModerationService(
            user_repo, event_repo, interest_repo
        )
        app.state.story_service = StoryService(story_repo)
        app.state.report_service = ReportService(
            report_repo,
            DiscordWebhookProvider(settings.report_webhook, webhook_http)
            if settings.report_webhook
            else None,
        )
        app.state.forgot_password_limiter = RateLimiter(
            "forgot_password",
            settings.forgot_password_rate_limit,
            settings.redis.redis_uri,
        )

        scheduler_task: Optional[asyncio.Task] = None
        if settings.scheduler.scheduler_enabled:
            scheduler = EventStatusScheduler(
                event_repo,
                subscription_service,
                interval_seconds=settings.scheduler.scheduler_interval_seconds,
            )
            scheduler_task = asyncio.create_task(scheduler.run_forever())

        log.info("app_started", env=settings.env, scheduler=scheduler_task is not None)

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        if scheduler_task is not None:
            scheduler_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await scheduler_task
        for client in (razorpay_http, email_http, webhook_http):
            await client.aclose()
        await mongo_client.close()
        if redis_client is not None:
            await redis_client.aclose()
        log.info("app_stopped")

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(profile_router)
    app.include_router(payment_router)
    app.include_router(interest_router)
    app.include_router(chat_router)
    app.include_router(event_router)
    app.include_router(report_router)
    app.include_router(notification_router)
    app.include_router(story_router)
    app.include_router(admin_router)

    return app
