import os
import uuid
from typing import Optional

import firebase_admin
from firebase_admin import credentials, messaging
from loguru import logger
from starlette.concurrency import run_in_threadpool


class MessagingClient:
    """
    Process-wide handle to Firebase Cloud Messaging.
    - created once at startup, shared read-only by every request
    - SDK calls are blocking, so they run in the worker thread pool
    """

    def __init__(self, app: firebase_admin.App, dry_run: bool = False) -> None:
        self._app = app
        self.dry_run = dry_run

    @classmethod
    def from_credentials(
        cls,
        path: str,
        project_id: Optional[str] = None,
        dry_run: bool = False,
    ) -> "MessagingClient":
        if os.path.exists(path):
            cred = credentials.Certificate(path)
            logger.info(f"Using Firebase service account: {path}")
        else:
            logger.warning(
                f"Service account file {path} not found, falling back to application default credentials"
            )
            cred = credentials.ApplicationDefault()

        options = {"projectId": project_id} if project_id else None
        # Named app so repeated startups in one process never collide
        app = firebase_admin.initialize_app(
            cred, options=options, name=f"push-relay-{uuid.uuid4().hex}"
        )
        logger.info(f"Firebase app initialized: {app.name} (dry_run={dry_run})")

        return cls(app, dry_run=dry_run)

    @property
    def app(self) -> firebase_admin.App:
        return self._app

    async def send(self, message: messaging.Message) -> str:
        return await run_in_threadpool(
            messaging.send, message, dry_run=self.dry_run, app=self._app
        )

    async def send_multicast(
        self, message: messaging.MulticastMessage
    ) -> messaging.BatchResponse:
        return await run_in_threadpool(
            messaging.send_each_for_multicast,
            message,
            dry_run=self.dry_run,
            app=self._app,
        )

    def close(self) -> None:
        firebase_admin.delete_app(self._app)
        logger.info(f"Firebase app deleted: {self._app.name}")
