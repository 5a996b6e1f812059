"""简体中文翻译表"""

STRINGS: dict[str, str] = {
    # ── 异常 ──
    "exc.protocol_error": "协议错误",
    "exc.invalid_envelope": "收到的数据不是合法的消息信封",
    "exc.malformed_payload": "消息负载缺少必需字段",
    "exc.kind_mismatch": "消息类型不匹配。给定: {actual}, 需要: {expected}",
    "exc.transport_error": "传输层错误",
    "exc.session_state": "当前会话状态不允许此操作",
    "exc.already_initialized": "会话注册表已初始化",
    "exc.config_error": "配置错误",

    # ── 命令行 ──
    "cli.description": "运行一个通过 WebSocket 收发类型化消息的节点",
    "cli.listening": "节点 [bold]{identity}[/bold] 正在监听 {address}",
    "cli.connecting": "正在连接 {url} ...",
    "cli.received": "[green]<-[/green] {text}",
    "cli.sent": "[cyan]->[/cyan] {text}",
    "cli.not_sent": "[yellow]没有活动连接，已丢弃 {text}[/yellow]",
    "cli.bye": "节点已停止。",
    "cli.failed": "[red]节点运行失败: {error}[/red]",
}
