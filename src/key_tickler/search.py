import threading
import time
from typing import Optional

import structlog

from key_tickler.backends.base import DecryptBackend
from key_tickler.errors import InvalidInput, SearchCancelled, SearchEngineFailure
from key_tickler.keyspace import key_space, key_space_size
from key_tickler.models.search_config import SearchConfig
from key_tickler.models.search_result import Exhausted, Found, SearchResult
from key_tickler.oracle import PlaintextOracle, is_valid_plaintext
from key_tickler.state_queue import SingleSlotQueue
from key_tickler.state_snapshot import SearchPhase, SearchSnapshot

log = structlog.get_logger(__name__)

PREVIEW_LENGTH = 32


def run_trial(backend: DecryptBackend, ciphertext: bytes, key: bytes) -> bytes:
    """Decrypt with one candidate. Any failure aborts the search."""
    try:
        plaintext = backend.decrypt(ciphertext, key)
    except Exception as e:
        log.error("trial failed", backend=backend.name, key=key, error=str(e))
        raise SearchEngineFailure(f"{backend.name} backend failed on key {key!r}: {e}") from e

    if len(plaintext) != len(ciphertext):
        raise SearchEngineFailure(
            f"{backend.name} backend returned {len(plaintext)} bytes for a {len(ciphertext)} byte ciphertext"
        )
    return bytes(plaintext)


def brute_force(
    ciphertext: bytes,
    config: SearchConfig,
    backend: DecryptBackend,
    *,
    oracle: PlaintextOracle = is_valid_plaintext,
    state_queue: Optional[SingleSlotQueue[SearchSnapshot]] = None,
    stop_event: Optional[threading.Event] = None,
) -> SearchResult:
    """
    Try every candidate key, shortest first, until one decrypts to plausible
    plaintext.

    Returns Found on the first accepted key (nothing else is tried after it)
    or Exhausted once every length up to config.max_key_length is done.
    Raises SearchEngineFailure if the backend fails and SearchCancelled if
    stop_event is set; the check happens between trials.
    """
    alphabet = config.alphabet_bytes
    max_key_length = config.max_key_length
    state_version = 0
    trials = 0
    trials_total = 0
    start_time = time.perf_counter()

    def publish(phase: SearchPhase, key_length: int, candidate: bytes, preview: bytes = b"") -> None:
        nonlocal state_version
        if state_queue is None:
            return
        state_version += 1
        state_queue.publish(SearchSnapshot(
            state_version=state_version,
            phase=phase,
            key_length=key_length,
            max_key_length=max_key_length,
            candidate=candidate,
            trials=trials,
            trials_total=trials_total,
            elapsed=time.perf_counter() - start_time,
            preview=preview[:PREVIEW_LENGTH],
        ))

    try:
        ciphertext = bytes(ciphertext)
        if not ciphertext:
            raise InvalidInput("ciphertext is empty; every key would decrypt it to valid plaintext")
        trials_total = key_space_size(alphabet, max_key_length, config.enumeration)

        log.info(
            "search started",
            backend=backend.name,
            ciphertext_len=len(ciphertext),
            alphabet_len=len(alphabet),
            max_key_length=max_key_length,
            enumeration=config.enumeration,
            candidates=trials_total,
        )

        for key_length in range(1, max_key_length + 1):
            log.debug("scanning key length", key_length=key_length)

            for candidate in key_space(alphabet, key_length, config.enumeration):
                if stop_event is not None and stop_event.is_set():
                    log.warning("search cancelled", trials=trials)
                    raise SearchCancelled(f"search cancelled after {trials} trials")

                key = bytes(candidate)
                plaintext = run_trial(backend, ciphertext, key)
                trials += 1

                if oracle(plaintext):
                    elapsed = time.perf_counter() - start_time
                    publish("found", key_length, key, plaintext)
                    log.info("key found", key=key, trials=trials, elapsed=round(elapsed, 6))
                    return Found(key=key, plaintext=plaintext, elapsed=elapsed, trials=trials)

                publish("scanning", key_length, key, plaintext)

        elapsed = time.perf_counter() - start_time
        publish("exhausted", max_key_length, b"")
        log.info("key space exhausted", trials=trials, elapsed=round(elapsed, 6))
        return Exhausted(elapsed=elapsed, trials=trials)

    finally:
        # Always close the queue so the UI can exit.
        if state_queue is not None:
            state_queue.close()
