"""
Database Connector CLI 工具
===========================

提供命令行界面来查看支持的方言、测试连接、执行查询和管理设置。

使用示例:
    database-connector dialects
    database-connector test -T postgresql -s localhost/cdm -u ohdsi --prompt-password
    database-connector query -T sqlite -s data.db "SELECT * FROM person" --batch-size 500
    database-connector config set jar_folder ~/jdbc
    database-connector encrypt
"""

import argparse
import getpass
import sys
from typing import Any, List, Sequence

from rich.console import Console
from rich.table import Table

from .core.config import SettingsManager
from .core.credentials import EncryptedCredential, EnvCredential, PromptCredential
from .core.crypto import CryptoManager
from .core.details import create_connection_details
from .core.dialects import REGISTRY, Dialect, supported_dialects
from .core.dispatcher import Dispatcher
from .core.exceptions import DBConnectorError
from .utils.logging_utils import get_logger, setup_logging

# 获取模块级别的日志记录器
logger = get_logger(__name__)

# 表格中单元格的最大显示长度
MAX_CELL_LENGTH = 50


class DatabaseConnectorCLI:
    """
    Database Connector 命令行接口主类

    Attributes:
        console (Console): rich 控制台实例
        settings_manager (SettingsManager): 设置管理器
        dispatcher (Dispatcher): 连接调度器
    """

    def __init__(
        self,
        console: Console | None = None,
        settings_manager: SettingsManager | None = None,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        self.console = console or Console()
        self.settings_manager = settings_manager or SettingsManager()
        self.dispatcher = dispatcher or Dispatcher()

    def list_dialects(self, _args: argparse.Namespace) -> None:
        """以表格形式列出所有支持的方言"""
        table = Table(title="支持的数据库方言", show_header=True, header_style="bold magenta")
        table.add_column("方言", style="cyan")
        table.add_column("驱动", style="magenta")
        table.add_column("默认端口", justify="center")
        table.add_column("驱动文件模式")

        for dialect in Dialect:
            rule = REGISTRY[dialect]
            if rule.is_jdbc:
                driver = (
                    rule.driver_class
                    if isinstance(rule.driver_class, str)
                    else "按 jar 文件名选择"
                )
            else:
                driver = "SQLAlchemy (pysqlite)"
            table.add_row(
                rule.id, driver, rule.default_port or "-", rule.jar_pattern or "-"
            )

        self.console.print(table)

    def _build_details(self, args: argparse.Namespace):
        password: Any = args.password
        if args.password_env:
            password = EnvCredential(args.password_env)
        elif args.encrypted_password:
            password = EncryptedCredential(args.encrypted_password)
        elif args.prompt_password:
            password = PromptCredential()

        return create_connection_details(
            args.dialect,
            user=args.user,
            password=password,
            server=args.server,
            port=args.port,
            extra_settings=args.extra_settings,
            oracle_driver=args.oracle_driver,
            connection_string=args.connection_string,
            path_to_driver=args.path_to_driver,
        )

    def test_connection(self, args: argparse.Namespace) -> None:
        """
        测试连接能否打开

        Raises:
            SystemExit: 连接失败时以状态码 1 退出
        """
        try:
            details = self._build_details(args)
            with self.dispatcher.connect(details) as handle:
                self.console.print(
                    f"✅ [bold green]连接成功[/bold green] ({handle.dbms}, {handle.uuid})"
                )
        except DBConnectorError as e:
            logger.error(f"连接测试失败: {e}")
            self.console.print(f"❌ [bold red]连接测试失败:[/bold red] {e.message}")
            sys.exit(1)

    def execute_query(self, args: argparse.Namespace) -> None:
        """
        执行 SQL 语句，查询结果按批读取并以表格显示

        Raises:
            SystemExit: 执行失败时以状态码 1 退出
        """
        batch_size = args.batch_size or self.settings_manager.load().default_batch_size

        try:
            details = self._build_details(args)
            with self.dispatcher.connect(details) as handle:
                with handle.cursor(args.sql) as cursor:
                    columns = cursor.column_info()
                    if not columns:
                        self.console.print(f"✅ 执行成功，影响行数: {cursor.rows_affected}")
                        return

                    rows: List[tuple] = []
                    for batch in cursor.iter_batches(batch_size):
                        rows.extend(batch)
                        if args.max_rows and len(rows) >= args.max_rows:
                            rows = rows[: args.max_rows]
                            break
                    self._display_rows([column.name for column in columns], rows)
        except DBConnectorError as e:
            logger.error(f"执行查询失败: {e}")
            self.console.print(f"❌ [bold red]执行查询失败:[/bold red] {e.message}")
            sys.exit(1)

    def _display_rows(self, headers: Sequence[str], rows: Sequence[tuple]) -> None:
        if not rows:
            self.console.print("ℹ️  [yellow]没有查询到结果[/yellow]")
            return

        table = Table(title=f"查询结果 ({len(rows)} 行)", show_header=True, header_style="bold cyan")
        for header in headers:
            table.add_column(header, overflow="fold")
        for row in rows:
            table.add_row(*[_truncate_value(value) for value in row])
        self.console.print(table)

    def show_config(self, _args: argparse.Namespace) -> None:
        """显示当前生效的设置（包含环境变量覆盖）"""
        settings = self.settings_manager.load()
        table = Table(title=f"设置 ({self.settings_manager.config_path})", show_header=True)
        table.add_column("设置项", style="cyan")
        table.add_column("值")
        for key, value in settings.to_dict().items():
            if isinstance(value, list):
                value = " ".join(value)
            table.add_row(key, str(value) if value != "" else "-")
        self.console.print(table)

    def set_config(self, args: argparse.Namespace) -> None:
        try:
            self.settings_manager.set(args.key, args.value)
        except DBConnectorError as e:
            self.console.print(f"❌ [bold red]设置失败:[/bold red] {e.message}")
            sys.exit(1)
        self.console.print(f"✅ 设置项 [cyan]{args.key}[/cyan] 已更新")

    def encrypt_value(self, args: argparse.Namespace) -> None:
        """
        生成加密令牌，供 EncryptedCredential 使用

        口令取自 DATABASECONNECTOR_SECRET 环境变量。
        """
        value = args.value or getpass.getpass("要加密的内容: ")
        try:
            token = CryptoManager.from_environment().encrypt(value)
        except (DBConnectorError, ValueError) as e:
            self.console.print(f"❌ [bold red]加密失败:[/bold red] {e}")
            sys.exit(1)
        self.console.print(token, soft_wrap=True)


def _truncate_value(value: Any, max_length: int = MAX_CELL_LENGTH) -> str:
    if value is None:
        return "NULL"
    text = str(value)
    if len(text) > max_length:
        return text[: max_length - 3] + "..."
    return text


class ChineseHelpFormatter(argparse.RawDescriptionHelpFormatter):
    """中文帮助格式化器，优化帮助信息显示"""

    def _format_usage(self, usage, actions, groups, prefix):
        if prefix is None:
            prefix = "\n使用情况: "
        return super()._format_usage(usage, actions, groups, prefix)

    def start_section(self, heading):
        if heading == "options":
            heading = "下列选项可用"
        super().start_section(heading)


def _setup_connection_arguments(parser: argparse.ArgumentParser) -> None:
    """设置连接相关的命令行参数"""
    parser.add_argument(
        "-T", "--dialect", required=True, choices=supported_dialects(), help="数据库方言"
    )
    parser.add_argument("-s", "--server", help="服务器，部分方言使用 <host>/<database> 格式")
    parser.add_argument("-P", "--port", help="端口，默认使用方言默认端口")
    parser.add_argument("-u", "--user", help="用户名")
    parser.add_argument("-p", "--password", help="密码")
    parser.add_argument("--password-env", help="从指定环境变量读取密码")
    parser.add_argument("--encrypted-password", help="encrypt 命令生成的加密密码")
    parser.add_argument("--prompt-password", action="store_true", help="交互式输入密码")
    parser.add_argument("-e", "--extra-settings", help="附加到连接字符串的设置")
    parser.add_argument("-c", "--connection-string", help="完整连接字符串")
    parser.add_argument("-d", "--path-to-driver", help="驱动 jar 目录或文件")
    parser.add_argument(
        "--oracle-driver", choices=["thin", "oci"], default="thin", help="Oracle 驱动类型"
    )


def create_argument_parser(cli_instance: DatabaseConnectorCLI) -> argparse.ArgumentParser:
    """
    创建命令行参数解析器

    Args:
        cli_instance (DatabaseConnectorCLI): 已初始化的CLI实例

    Returns:
        argparse.ArgumentParser: 配置好的参数解析器
    """
    parser = argparse.ArgumentParser(
        prog="database-connector",
        usage="database-connector [<命令>] [<选项>]",
        description="Database Connector - 统一数据库连接工具",
        formatter_class=ChineseHelpFormatter,
        epilog="""
使用示例:
  database-connector dialects
  database-connector test -T postgresql -s localhost/cdm -u ohdsi --prompt-password
  database-connector query -T sqlite -s data.db "SELECT * FROM person"
  database-connector config show
        """,
        add_help=False,
    )

    parser.add_argument(
        "-h",
        "--help",
        action="help",
        default=argparse.SUPPRESS,
        help="显示选定命令的帮助信息",
    )

    subparsers = parser.add_subparsers(title="下列命令有效", dest="command")

    # dialects 命令
    dialects_parser = subparsers.add_parser("dialects", help="列出支持的数据库方言")
    dialects_parser.set_defaults(func=cli_instance.list_dialects)

    # test 命令
    test_parser = subparsers.add_parser("test", help="测试连接")
    _setup_connection_arguments(test_parser)
    test_parser.set_defaults(func=cli_instance.test_connection)

    # query 命令
    query_parser = subparsers.add_parser("query", help="执行SQL语句")
    _setup_connection_arguments(query_parser)
    query_parser.add_argument("sql", help="SQL语句")
    query_parser.add_argument("--batch-size", type=int, help="每批读取的行数")
    query_parser.add_argument("--max-rows", type=int, help="最多显示的行数")
    query_parser.set_defaults(func=cli_instance.execute_query)

    # config 命令
    config_parser = subparsers.add_parser("config", help="查看或修改设置")
    config_subparsers = config_parser.add_subparsers(dest="config_command")
    show_parser = config_subparsers.add_parser("show", help="显示当前设置")
    show_parser.set_defaults(func=cli_instance.show_config)
    set_parser = config_subparsers.add_parser("set", help="修改设置项")
    set_parser.add_argument("key", help="设置项名称")
    set_parser.add_argument("value", help="设置值")
    set_parser.set_defaults(func=cli_instance.set_config)

    # encrypt 命令
    encrypt_parser = subparsers.add_parser("encrypt", help="生成加密凭据")
    encrypt_parser.add_argument("value", nargs="?", help="要加密的内容，省略时交互式输入")
    encrypt_parser.set_defaults(func=cli_instance.encrypt_value)

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Database Connector CLI 主入口函数"""
    cli = DatabaseConnectorCLI()
    setup_logging(level=cli.settings_manager.load().log_level)
    parser = create_argument_parser(cli)

    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        parser.print_help()
        sys.exit(0)

    args = parser.parse_args(argv)

    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
