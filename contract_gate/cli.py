#!/usr/bin/env python3
"""
contract-gate CLI.

Commands:
    contracts   - List loaded contracts and skipped files
    resolve     - Show the contract operation a URL and method resolve to
    validate    - Resolve, then validate parameters and body
    check       - Run a free-text health check request

Usage:
    contract-gate --contracts-dir api_specs contracts
    contract-gate --contracts-dir api_specs resolve https://api.example.com/v1/albums/1/tracks
    contract-gate --config gate.yaml validate https://api.example.com/v1/search \\
        --param q=beatles --param type=album
    contract-gate --config gate.yaml check \\
        "Determine the status of https://api.example.com/v1/albums/1 using GET"
"""

import logging
import os
import sys
from pathlib import Path

import click

from contract_gate.agent import describe_endpoint, describe_not_found, describe_validation
from contract_gate.bootstrap import Runtime, build_agent, build_runtime
from contract_gate.config import CONTRACTS_DIR_ENV, ConfigError, GateConfig, load_config
from contract_gate.contracts import ContractDirectoryError
from contract_gate.routing import NotFound


def _parse_pairs(pairs, option_name):
    parsed = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint=option_name)
        key, value = pair.split("=", 1)
        parsed[key.strip()] = value.strip()
    return parsed


class GateContext:
    """Lazily loads configuration and contracts for the invoked command."""

    def __init__(self, config_path, contracts_dir, synthetic):
        self.config_path = config_path
        self.contracts_dir = contracts_dir
        self.synthetic = synthetic
        self._config = None
        self._runtime = None

    @property
    def config(self) -> GateConfig:
        if self._config is None:
            try:
                if self.config_path is not None:
                    self._config = load_config(Path(self.config_path))
                else:
                    contracts_dir = self.contracts_dir or os.environ.get(CONTRACTS_DIR_ENV)
                    if not contracts_dir:
                        raise click.UsageError(
                            f"Pass --config or --contracts-dir, or set {CONTRACTS_DIR_ENV}"
                        )
                    self._config = GateConfig(contracts_dir=Path(contracts_dir))
            except ConfigError as e:
                raise click.ClickException(str(e))

            if self.synthetic:
                self._config = GateConfig(
                    contracts_dir=self._config.contracts_dir,
                    executor="synthetic",
                    timeout_seconds=self._config.timeout_seconds,
                    synthetic_seed=self._config.synthetic_seed,
                    check_path_parameters=self._config.check_path_parameters,
                )
        return self._config

    @property
    def runtime(self) -> Runtime:
        if self._runtime is None:
            try:
                self._runtime = build_runtime(
                    self.config.contracts_dir,
                    check_path_parameters=self.config.check_path_parameters,
                )
            except ContractDirectoryError as e:
                raise click.ClickException(str(e))
        return self._runtime


@click.group()
@click.version_option(version="0.1.0", prog_name="contract-gate")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="YAML config file")
@click.option("--contracts-dir", type=click.Path(file_okay=False), help="Contracts directory")
@click.option("--synthetic", is_flag=True, help="Use the synthetic executor for 'check'")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx, config_path, contracts_dir, synthetic, verbose):
    """Match requests against API contracts and validate them before sending."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = GateContext(config_path, contracts_dir, synthetic)


@cli.command("contracts")
@click.pass_obj
def list_contracts(gate):
    """List loaded contracts and skipped files."""
    runtime = gate.runtime
    for contract in runtime.store.contracts:
        servers = ", ".join(contract.servers) or "no servers"
        click.echo(f"{contract.source}: {contract.title or 'untitled'} ({servers}, {len(contract.paths)} paths)")
    for skipped in runtime.store.skipped:
        click.echo(f"skipped {skipped.source}: {skipped.reason}", err=True)
    click.echo(f"{len(runtime.store)} contracts, {len(runtime.host_index)} hosts")


@cli.command()
@click.argument("url")
@click.option("--method", "-X", default="GET", show_default=True)
@click.pass_obj
def resolve(gate, url, method):
    """Show the contract operation URL resolves to."""
    resolution = gate.runtime.resolver.resolve(url, method)
    if isinstance(resolution, NotFound):
        click.echo(describe_not_found(resolution))
        sys.exit(1)
    click.echo(describe_endpoint(resolution))


@cli.command()
@click.argument("url")
@click.option("--method", "-X", default="GET", show_default=True)
@click.option("--param", "-p", "params", multiple=True, help="Query parameter KEY=VALUE")
@click.option("--header", "-H", "headers", multiple=True, help="Header KEY=VALUE")
@click.option("--body", "-d", default=None, help="Request body")
@click.pass_obj
def validate(gate, url, method, params, headers, body):
    """Validate a request against its contract operation."""
    resolution = gate.runtime.resolver.resolve(url, method)
    if isinstance(resolution, NotFound):
        click.echo(describe_not_found(resolution))
        sys.exit(1)

    result = gate.runtime.validator.validate(
        resolution,
        _parse_pairs(params, "--param"),
        body,
        headers=_parse_pairs(headers, "--header") if headers else None,
    )
    click.echo(f"{resolution.method} {resolution.path_pattern}")
    click.echo(describe_validation(result))
    if not result.valid:
        sys.exit(1)


@cli.command()
@click.argument("text")
@click.pass_obj
def check(gate, text):
    """Run a free-text health check request."""
    agent = build_agent(gate.config, gate.runtime)
    try:
        click.echo(agent.process_request(text))
    finally:
        agent.close()


if __name__ == "__main__":
    cli()
