"""Readers for the packaging and deployment descriptors.

The Dockerfile, ``containers.json`` and ``public-endpoint.json`` are consumed
by external tools, but they all have to agree with the port the app listens
on. ``check_consistency`` reports every place where they don't.
"""
import json
import logging
import os
import sys
from typing import Dict, List, NamedTuple, Optional, Tuple

from . import config

LOG = logging.getLogger(__name__)

DOCKERFILE = "Dockerfile"
CONTAINERS_FILE = "containers.json"
PUBLIC_ENDPOINT_FILE = "public-endpoint.json"


class DescriptorError(ValueError):
    pass


class Container(NamedTuple):
    name: str
    image: str
    ports: Dict[int, str]


class PublicEndpoint(NamedTuple):
    container_name: str
    container_port: int
    health_check_path: Optional[str] = None


def _instructions(text: str):
    """Yield (keyword, arguments) pairs, joining continuation lines."""
    pending = ""
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.endswith("\\"):
            pending += line[:-1] + " "
            continue
        line = pending + line
        pending = ""
        keyword, _, rest = line.partition(" ")
        yield keyword.upper(), rest.strip()
    if pending.strip():
        keyword, _, rest = pending.strip().partition(" ")
        yield keyword.upper(), rest.strip()


def read_exposed_ports(path: str) -> List[Tuple[int, str]]:
    """Return every ``EXPOSE``d port of a Dockerfile as (port, protocol)."""
    try:
        with open(path) as f:
            text = f.read()
    except OSError as e:
        raise DescriptorError(f"{path}: cannot read: {e.strerror}") from e
    exposed = []
    for keyword, args in _instructions(text):
        if keyword != "EXPOSE":
            continue
        for token in args.split():
            port, _, protocol = token.partition("/")
            protocol = (protocol or "tcp").lower()
            if not port.isdigit() or protocol not in ("tcp", "udp"):
                raise DescriptorError(f"{path}: cannot parse EXPOSE {token!r}")
            exposed.append((int(port), protocol))
    return exposed


def _load_json(path: str):
    try:
        with open(path) as f:
            return json.load(f)
    except OSError as e:
        raise DescriptorError(f"{path}: cannot read: {e.strerror}") from e
    except json.JSONDecodeError as e:
        raise DescriptorError(f"{path}: invalid JSON: {e}") from e


def _port(value, path: str) -> int:
    if isinstance(value, bool):
        raise DescriptorError(f"{path}: invalid port {value!r}")
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise DescriptorError(f"{path}: invalid port {value!r}") from None
    if not 0 < port < 65536:
        raise DescriptorError(f"{path}: port {port} out of range")
    return port


def _object(value, what: str, path: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DescriptorError(f"{path}: {what} must be an object, got {value!r}")
    return value


def load_container_map(path: str) -> Dict[str, Container]:
    data = _load_json(path)
    if not isinstance(data, dict) or not data:
        raise DescriptorError(f"{path}: expected a non-empty object of containers")
    containers = {}
    for name, spec in data.items():
        if not isinstance(spec, dict) or "image" not in spec:
            raise DescriptorError(f"{path}: container {name!r} has no image")
        ports = {}
        for port, protocol in _object(spec.get("ports"), f"{name} ports", path).items():
            if not isinstance(protocol, str):
                raise DescriptorError(f"{path}: protocol for port {port} must be a string")
            ports[_port(port, path)] = protocol.upper()
        containers[name] = Container(name=name, image=spec["image"], ports=ports)
    return containers


def load_public_endpoint(path: str) -> PublicEndpoint:
    data = _load_json(path)
    if not isinstance(data, dict):
        raise DescriptorError(f"{path}: expected an object")
    try:
        name = data["containerName"]
        port = data["containerPort"]
    except KeyError as e:
        raise DescriptorError(f"{path}: missing {e.args[0]}") from None
    if not isinstance(name, str):
        raise DescriptorError(f"{path}: containerName must be a string, got {name!r}")
    health_check = _object(data.get("healthCheck"), "healthCheck", path)
    return PublicEndpoint(
        container_name=name,
        container_port=_port(port, path),
        health_check_path=health_check.get("path"),
    )


def check_consistency(directory: str = ".", port: Optional[int] = None) -> List[str]:
    """Cross-check the descriptors in ``directory`` against the app's port.

    Returns a list of problems, empty when everything agrees.
    """
    port = config.PORT if port is None else port
    problems = []

    exposed = read_exposed_ports(os.path.join(directory, DOCKERFILE))
    if (port, "tcp") not in exposed:
        problems.append(f"{DOCKERFILE} does not expose {port}/tcp (exposes {exposed})")

    containers = load_container_map(os.path.join(directory, CONTAINERS_FILE))
    endpoint = load_public_endpoint(os.path.join(directory, PUBLIC_ENDPOINT_FILE))

    container = containers.get(endpoint.container_name)
    if container is None:
        problems.append(
            f"{PUBLIC_ENDPOINT_FILE} names container {endpoint.container_name!r} "
            f"which is not in {CONTAINERS_FILE}"
        )
    else:
        if container.ports.get(port) != "HTTP":
            problems.append(f"container {container.name!r} does not map {port} to HTTP")
        if endpoint.container_port not in container.ports:
            problems.append(
                f"public endpoint port {endpoint.container_port} is not opened "
                f"by container {container.name!r}"
            )
    if endpoint.container_port != port:
        problems.append(
            f"public endpoint targets port {endpoint.container_port}, app listens on {port}"
        )

    for problem in problems:
        LOG.warning(problem)
    return problems


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    directory = argv[0] if argv else "."
    try:
        problems = check_consistency(directory)
    except DescriptorError as e:
        problems = [str(e)]
    for problem in problems:
        print(problem, file=sys.stderr)
    sys.exit(1 if problems else 0)


if __name__ == "__main__":
    main()
