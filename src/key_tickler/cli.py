import functools
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Tuple

import click
import requests
import structlog

from key_tickler.backends.registry import backend_names, get_backend
from key_tickler.cipher import rc4
from key_tickler.errors import KeyTicklerError
from key_tickler.keyspace import STRATEGIES
from key_tickler.log import configure_logging
from key_tickler.models.search_config import ALPHABETS, DEFAULT_MAX_KEY_LENGTH, SearchConfig, load_config
from key_tickler.models.search_result import Found, SearchResult
from key_tickler.search import brute_force
from key_tickler.state_queue import SingleSlotQueue
from key_tickler.state_snapshot import SearchSnapshot
from key_tickler.ui import ui_loop
from key_tickler.utils import (
    b64_decode,
    encode_ciphertext,
    load_ciphertext,
    printable_key,
    write_plaintext,
    CIPHERTEXT_FORMATS,
    CiphertextFormat,
)

log = structlog.get_logger(__name__)

DEMO_BASE_URL = "http://127.0.0.1:8000"


def handle_errors(fn):
    """Report library errors as a one-line message and exit 1."""
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except KeyTicklerError as e:
            log.error("search failed", error=str(e), error_type=type(e).__name__)
            click.echo(f"Error: {e}", err=True)
            raise click.exceptions.Exit(1)
    return wrapper


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON lines")
def cli(verbose: bool, json_logs: bool):
    configure_logging(verbose=verbose, json_logs=json_logs)


def solver(ciphertext: bytes, config: SearchConfig, show_ui: bool = True) -> SearchResult:
    """Run the search in a worker thread while the main thread drives the UI."""
    state_queue: Optional[SingleSlotQueue[SearchSnapshot]] = SingleSlotQueue() if show_ui else None
    stop_event = threading.Event()

    with get_backend(config.backend) as backend, ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(
            brute_force, ciphertext, config, backend,
            state_queue=state_queue, stop_event=stop_event,
        )

        try:
            if state_queue is not None:
                ui_loop(state_queue)
            return future.result()
        except KeyboardInterrupt:
            # The current trial finishes, then the search raises SearchCancelled.
            stop_event.set()
            if state_queue is not None:
                state_queue.close()
            return future.result()


def report_result(result: SearchResult, plaintext_path: Optional[str] = None) -> None:
    """Print the outcome and write the plaintext once if a key was found."""
    if isinstance(result, Found):
        click.echo(f"Decryption successful, key found: {printable_key(result.key)}")
        click.echo(f"Time taken: {result.elapsed:.6f} seconds ({result.trials} keys tried)")
        if plaintext_path is not None:
            write_plaintext(plaintext_path, result.plaintext)
            click.echo(f"Plaintext written to {plaintext_path}")
        return

    click.echo("No valid key found")
    click.echo(f"Time taken: {result.elapsed:.6f} seconds ({result.trials} keys tried)")
    raise click.exceptions.Exit(1)


@cli.command()
@click.option("--ciphertext-path", "-c", required=True, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--ciphertext-format",
    "-f",
    type=click.Choice(CIPHERTEXT_FORMATS),
    default="raw",
)
@click.option("--charset", type=click.Choice(list(ALPHABETS)), default="alnum", help="Named alphabet preset")
@click.option("--alphabet", "-a", default=None, help="Literal alphabet, overrides --charset")
@click.option("--max-key-length", "-m", type=int, default=DEFAULT_MAX_KEY_LENGTH, show_default=True)
@click.option("--backend", "-b", type=click.Choice(backend_names()), default="numpy", show_default=True)
@click.option("--enumeration", "-e", type=click.Choice(STRATEGIES), default="odometer", show_default=True)
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None, help="Defaults to <ciphertext-path>.plaintext")
@click.option("--no-ui", is_flag=True, help="Disable the live progress view")
@handle_errors
def solve(
    ciphertext_path: str,
    ciphertext_format: CiphertextFormat,
    charset: str,
    alphabet: Optional[str],
    max_key_length: int,
    backend: str,
    enumeration: str,
    output: Optional[str],
    no_ui: bool,
):
    """Recover the RC4 key of a ciphertext file by brute force."""
    config = load_config(
        alphabet=alphabet if alphabet is not None else ALPHABETS[charset],
        max_key_length=max_key_length,
        backend=backend,
        enumeration=enumeration,
    )
    ciphertext = load_ciphertext(ciphertext_path, ciphertext_format)
    result = solver(ciphertext, config, show_ui=not no_ui)
    report_result(result, output or f"{ciphertext_path}.plaintext")


@cli.command()
@click.option("--input-path", "-i", required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--key", "-k", required=True, help="Key text (latin-1)")
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None, help="Defaults to <input-path>.rc4")
@click.option(
    "--output-format",
    "-f",
    type=click.Choice(CIPHERTEXT_FORMATS),
    default="raw",
)
@handle_errors
def encrypt(input_path: str, key: str, output: Optional[str], output_format: CiphertextFormat):
    """Encrypt a file with the same cipher the search attacks."""
    try:
        key_bytes = key.encode("latin-1")
    except UnicodeEncodeError:
        raise click.BadParameter("key characters must fit in a single byte", param_hint="--key")

    with open(input_path, "rb") as f:
        plaintext = f.read()
    ciphertext = rc4.crypt(plaintext, key_bytes)
    output_path = output or f"{input_path}.rc4"
    with open(output_path, "wb") as f:
        f.write(encode_ciphertext(ciphertext, output_format))
    click.echo(f"Ciphertext written to {output_path}")


def fetch_demo_data(endpoint: str) -> Tuple[bytes, str, int]:
    """Fetch a demo ciphertext and its search parameters from the given endpoint."""
    try:
        response = requests.get(endpoint, timeout=10)
    except requests.RequestException as e:
        raise click.ClickException(f"Failed to get {endpoint}: {e}") from e
    if response.status_code != 200:
        raise click.ClickException(
            f"Failed to get {endpoint}: {response.status_code} {response.text}"
        )
    data = response.json()
    return b64_decode(data["ciphertext_b64"]), data["alphabet"], data["max_key_length"]


def run_demo(name: str, base_url: str, backend: str, no_ui: bool) -> None:
    ciphertext, alphabet, max_key_length = fetch_demo_data(f"{base_url}/api/{name}")
    config = load_config(alphabet=alphabet, max_key_length=max_key_length, backend=backend)
    result = solver(ciphertext, config, show_ui=not no_ui)
    if isinstance(result, Found):
        click.echo(result.plaintext.decode("latin-1"))
    report_result(result)


def demo_options(fn):
    fn = click.option("--no-ui", is_flag=True, help="Disable the live progress view")(fn)
    fn = click.option("--backend", "-b", type=click.Choice(backend_names()), default="numpy")(fn)
    fn = click.option("--base-url", default=DEMO_BASE_URL, show_default=True)(fn)
    return fn


@cli.command()
@demo_options
@handle_errors
def demo1(base_url: str, backend: str, no_ui: bool):
    """Run with data from the demo1 endpoint."""
    run_demo("demo1", base_url, backend, no_ui)


@cli.command()
@demo_options
@handle_errors
def demo2(base_url: str, backend: str, no_ui: bool):
    """Run with data from the demo2 endpoint."""
    run_demo("demo2", base_url, backend, no_ui)


@cli.command()
@demo_options
@handle_errors
def demo3(base_url: str, backend: str, no_ui: bool):
    """Run with data from the demo3 endpoint."""
    run_demo("demo3", base_url, backend, no_ui)


@cli.command("demo-api")
@click.option("--host", default="127.0.0.1", help="Host to bind the server to")
@click.option("--port", default=8000, help="Port to bind the server to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
def demo_api(host: str, port: int, reload: bool):
    """Start the demo API server that hands out RC4 ciphertexts."""
    try:
        import uvicorn
        from demo_api.api import app
    except ImportError as e:
        click.echo(f"Error: Demo API dependencies not available: {e}")
        click.echo("Install with: pip install 'key-tickler[demo]'")
        raise click.Abort()

    click.echo(f"Starting demo API server on http://{host}:{port}")
    click.echo("Available endpoints:")
    click.echo("  - GET  /api/demo1   - Short text, 1 byte key")
    click.echo("  - GET  /api/demo2   - Sentence, 2 byte key")
    click.echo("  - GET  /api/demo3   - Paragraph, 3 byte key")
    click.echo("  - POST /api/encrypt - Encrypt plaintext with a given key")
    click.echo("\nPress Ctrl+C to stop the server")

    if reload:
        # Use import string for reload mode
        uvicorn.run("demo_api.api:app", host=host, port=port, reload=True)
    else:
        uvicorn.run(app, host=host, port=port, reload=False)


if __name__ == "__main__":
    cli()
