"""
Test runner: runs a feature file against a freshly spawned network.

Feature file format:

    Description: Small network smoke test
    Network: ./small-network.toml
    Creds: config

    # assertions
    alice: is up
    bob: log line contains "Imported #1"

The runner owns the network it spawns: it stops it itself, whatever the
outcome of the assertions.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from . import orchestrator
from .config import DEFAULT_CREDS_NAME, get_creds_file_path, read_network_config
from .errors import CredsNotFoundError, TestFileError
from .network import Network

logger = logging.getLogger(__name__)

HEADER_PATTERN = re.compile(r"^(Description|Network|Creds):\s*(.+)$")
IS_UP_PATTERN = re.compile(r"^(?P<node>[\w.-]+):\s*is up$")
LOG_CONTAINS_PATTERN = re.compile(r'^(?P<node>[\w.-]+):\s*log line contains\s+"(?P<text>.*)"$')


@dataclass
class Assertion:
    line_number: int
    raw: str
    node: str
    kind: str  # is_up, log_contains
    text: Optional[str] = None


@dataclass
class AssertionResult:
    assertion: Assertion
    passed: bool
    detail: str = ""


@dataclass
class FeatureFile:
    path: Path
    network: Path
    description: str = ""
    creds: Optional[str] = None
    assertions: list[Assertion] = field(default_factory=list)


def parse_feature_file(path: str | Path) -> FeatureFile:
    """
    Parse a feature file.

    Raises:
        TestFileError: If the file is missing, has no Network header,
            or contains an unsupported line
    """
    path = Path(path)
    if not path.is_file():
        raise TestFileError(f"Test file does not exist: {path}")

    headers: dict[str, str] = {}
    assertions: list[Assertion] = []

    for line_number, line in enumerate(path.read_text().splitlines(), 1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        header = HEADER_PATTERN.match(line)
        if header:
            headers[header.group(1)] = header.group(2).strip()
            continue

        is_up = IS_UP_PATTERN.match(line)
        if is_up:
            assertions.append(Assertion(line_number, line, is_up.group("node"), "is_up"))
            continue

        contains = LOG_CONTAINS_PATTERN.match(line)
        if contains:
            assertions.append(Assertion(
                line_number, line, contains.group("node"), "log_contains", contains.group("text")
            ))
            continue

        raise TestFileError(f"{path}:{line_number}: unsupported line: {line}")

    if "Network" not in headers:
        raise TestFileError(f"{path}: missing 'Network:' header")

    return FeatureFile(
        path=path,
        network=(path.parent / headers["Network"]).resolve(),
        description=headers.get("Description", ""),
        creds=headers.get("Creds"),
        assertions=assertions,
    )


async def check(network: Network, assertion: Assertion) -> AssertionResult:
    if assertion.kind == "is_up":
        up = await network.is_node_up(assertion.node)
        return AssertionResult(assertion, up, "" if up else f"{assertion.node} is not running")

    logs = await network.node_logs(assertion.node)
    found = assertion.text in logs
    return AssertionResult(assertion, found, "" if found else f"'{assertion.text}' not found in logs")


def print_results(feature: FeatureFile, results: list[AssertionResult]) -> None:
    passed = sum(1 for r in results if r.passed)
    print()
    print(f"Test: {feature.description or feature.path.name}")
    print("-" * 60)
    for result in results:
        status = "✓" if result.passed else "✗"
        line = f"  {status} {result.assertion.raw}"
        if result.detail:
            line += f"  ({result.detail})"
        print(line)
    print("-" * 60)
    print(f"  {passed}/{len(results)} passed")


async def run(test_file: str, provider: str, in_container: bool = False) -> int:
    """
    Spawn the feature file's network, check its assertions, tear it down.

    Args:
        test_file: Path to the feature file
        provider: Provider to run the network on
        in_container: Running inside CI; logs are always uploaded

    Returns:
        0 when every assertion passed, 1 otherwise
    """
    feature = parse_feature_file(test_file)
    config = read_network_config(feature.network)
    config.override_provider(provider)

    creds = ""
    if config.provider == "kubernetes":
        creds = get_creds_file_path(feature.creds or DEFAULT_CREDS_NAME) or ""
        if not creds:
            raise CredsNotFoundError(feature.creds)

    network = await orchestrator.start(creds, config, monitor=False)
    results: list[AssertionResult] = []
    try:
        for assertion in feature.assertions:
            result = await check(network, assertion)
            logger.debug(f"{assertion.raw}: {'passed' if result.passed else 'failed'}")
            results.append(result)
    finally:
        failed = len(results) < len(feature.assertions) or not all(r.passed for r in results)
        if in_container or failed:
            try:
                await network.upload_logs()
            except Exception as e:
                logger.warning(f"Failed to upload logs for {network.namespace}: {e}")
        await network.stop()

    print_results(feature, results)
    return 0 if all(r.passed for r in results) else 1
