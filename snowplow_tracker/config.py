from __future__ import annotations

from dataclasses import dataclass

from snowplow_tracker.utils.environ import environ


@dataclass(frozen=True)
class TrackerConfig:
    """Configuration for a L{Tracker<snowplow_tracker.tracker.Tracker>}.

    @type enabled: bool
    @param enabled: Whether the tracker should build and emit payloads.
    @type namespace: Optional[str]
    @param namespace: Tracker namespace, sent as C{tna}.
    @type app_id: Optional[str]
    @param app_id: Application id, sent as C{aid}.
    @type platform: str
    @param platform: Default platform of subjects created by the
        tracker, sent as C{p}.
    @type encode_base64: bool
    @param encode_base64: Whether JSON fields are base64-encoded
        (C{cx}, C{ue_px}) or sent raw (C{co}, C{ue_pr}).
    @type emitter: str
    @param emitter: Name of the emitter used when none is passed to
        the tracker (e.g. "noop", "stdout").
    @type debug: bool
    @param debug: If True, the default emitter is "stdout".
    """

    enabled: bool = True
    namespace: str | None = None
    app_id: str | None = None
    platform: str = "srv"
    encode_base64: bool = True
    emitter: str = "noop"
    debug: bool = False

    @classmethod
    def from_environ(cls) -> TrackerConfig:
        """Build a config from environment variables.

        This reads the C{SNOWPLOW_TRACKER_*} settings and returns a
        fully populated L{TrackerConfig} instance.
        """
        debug = bool(environ.SNOWPLOW_TRACKER_DEBUG)
        emitter = environ.SNOWPLOW_TRACKER_EMITTER or (
            "stdout" if debug else "noop"
        )
        return cls(
            enabled=bool(environ.SNOWPLOW_TRACKER_ENABLED),
            namespace=environ.SNOWPLOW_TRACKER_NAMESPACE,
            app_id=environ.SNOWPLOW_TRACKER_APP_ID,
            platform=environ.SNOWPLOW_TRACKER_PLATFORM,
            encode_base64=bool(environ.SNOWPLOW_TRACKER_ENCODE_BASE64),
            emitter=emitter,
            debug=debug,
        )
