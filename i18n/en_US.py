"""English translation table."""

STRINGS: dict[str, str] = {
    # ── exceptions ──
    "exc.protocol_error": "Protocol error",
    "exc.invalid_envelope": "Data received is not a valid envelope",
    "exc.malformed_payload": "Envelope payload is missing required fields",
    "exc.kind_mismatch": "Using the wrong message kind. Given: {actual}, Needed: {expected}",
    "exc.transport_error": "Transport error",
    "exc.session_state": "Operation not allowed in the current session state",
    "exc.already_initialized": "Session registry is already initialized",
    "exc.config_error": "Invalid configuration",

    # ── command line ──
    "cli.description": "Run a peer that exchanges typed messages over WebSocket",
    "cli.listening": "Peer [bold]{identity}[/bold] listening on {address}",
    "cli.connecting": "Connecting to {url} ...",
    "cli.received": "[green]<-[/green] {text}",
    "cli.sent": "[cyan]->[/cyan] {text}",
    "cli.not_sent": "[yellow]No active connection, dropped {text}[/yellow]",
    "cli.bye": "Peer stopped.",
    "cli.failed": "[red]Peer failed: {error}[/red]",
}
