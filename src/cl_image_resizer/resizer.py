"""ImageResizer runtime - command dispatch onto background workers."""

from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Final, Self

from loguru import logger

from .algo.pipeline import resize_image
from .common.errors import ErrorKind, MalformedRequestError
from .common.path_provider import LocalPathProvider, PathProvider
from .common.schemas import ResizeOutcome, ResizeRequest
from .config import ResizerSettings

RESIZE_ACTION: Final[str] = "resize"
ARGUMENT_NUMBER: Final[int] = 1

ResultCallback = Callable[[ResizeOutcome], None]


class ImageResizer:
    """Receives resize commands and runs each one on a worker thread.

    Responsibilities:
    - Validates the argument list before any pipeline stage runs
    - Runs one pipeline per request, without shared mutable state
    - Reports every result, success or failure, through the callback

    Example:
        with ImageResizer() as resizer:
            resizer.execute(
                "resize",
                [{"uri": "/photos/a.jpg", "width": 800, "base64": True}],
                lambda outcome: print(outcome.result),
            )
    """

    def __init__(
        self,
        path_provider: PathProvider | None = None,
        settings: ResizerSettings | None = None,
        max_workers: int | None = None,
    ):
        """Initialize resizer.

        Args:
            path_provider: Directory/URI policy. Defaults to LocalPathProvider from settings.
            settings: Runtime settings. Defaults to ResizerSettings() read from the environment.
            max_workers: Worker thread count. Defaults to settings.max_workers.
        """
        self.settings: ResizerSettings = settings if settings is not None else ResizerSettings()
        self.path_provider: PathProvider = (
            path_provider
            if path_provider is not None
            else LocalPathProvider.from_settings(self.settings)
        )
        self._executor: ThreadPoolExecutor = ThreadPoolExecutor(
            max_workers=max_workers or self.settings.max_workers,
            thread_name_prefix="image-resizer",
        )

    def parse_arguments(self, args: Sequence[object]) -> ResizeRequest:
        """Validate the raw argument list into a ResizeRequest.

        Raises:
            MalformedRequestError: If the list does not hold exactly one valid object
        """
        if len(args) != ARGUMENT_NUMBER:
            raise MalformedRequestError(
                f"Expected {ARGUMENT_NUMBER} argument object, got {len(args)}"
            )
        return ResizeRequest.from_arguments(
            args[0], default_quality=self.settings.default_quality
        )

    def execute(
        self,
        action: str,
        args: Sequence[object],
        callback: ResultCallback,
    ) -> bool:
        """Dispatch a host command.

        Returns:
            False if the action is unknown, True otherwise. Results, including
            rejected requests, are delivered through ``callback``.
        """
        if action != RESIZE_ACTION:
            logger.warning(f"Unknown action: {action}")
            return False

        try:
            request = self.parse_arguments(args)
        except MalformedRequestError as exc:
            logger.error(f"Rejected resize request: {exc.message}")
            callback(ResizeOutcome.failed(ErrorKind.MALFORMED_REQUEST, exc.message))
            return True

        future = self.submit(request)
        future.add_done_callback(lambda done: callback(self._outcome_of(done)))
        return True

    @staticmethod
    def _outcome_of(future: Future[ResizeOutcome]) -> ResizeOutcome:
        try:
            return future.result()
        except Exception as exc:
            logger.exception(f"Unexpected error in resize worker: {exc}")
            return ResizeOutcome.failed(ErrorKind.DECODE_FAILURE, f"Resize failed: {exc}")

    def resize(self, request: ResizeRequest) -> ResizeOutcome:
        """Run a request on the calling thread."""
        outcome = resize_image(request, self.path_provider)
        if outcome.is_ok:
            logger.info(f"Resized {request.source.kind} source ({request.output_mode} output)")
        else:
            logger.error(f"Resize failed [{outcome.error_kind}]: {outcome.error}")
        return outcome

    def submit(self, request: ResizeRequest) -> Future[ResizeOutcome]:
        """Run a request on a worker thread."""
        return self._executor.submit(self.resize, request)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown(wait=True)
