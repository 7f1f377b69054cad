import os
from typing import Mapping, Optional
from dotenv import load_dotenv
from loguru import logger
from disease_sync.models.config import SyncConfig, DatabaseConfig, PoolSettings

DEFAULT_PORT = 3306

def _get_port(env: Mapping[str, str], key: str) -> int:
    raw = env.get(key)
    if raw is None:
        return DEFAULT_PORT
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"{key}={raw!r} 不是有效端口，使用默认值 {DEFAULT_PORT}")
        return DEFAULT_PORT

def _get_int(env: Mapping[str, str], key: str, default: int) -> int:
    if key in env:
        logger.debug(f"使用环境变量中的 {key}: {env[key]}")
        return int(env[key])
    logger.debug(f"使用默认值 {key}={default}")
    return default

def default_workers() -> int:
    """CPU核数减一，至少为2"""
    return max((os.cpu_count() or 1) - 1, 2)

def load_config(env_file: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> SyncConfig:
    """
    从环境变量（以及 .env 文件）加载同步配置

    Args:
        env_file: .env 文件路径，默认在当前目录向上查找
        environ: 环境变量映射，默认使用 os.environ

    Returns:
        SyncConfig对象

    Raises:
        ValueError: 配置内容无效
    """
    if environ is None:
        # 已存在的进程环境变量优先于 .env 中的值
        load_dotenv(env_file, override=False)
        environ = os.environ

    try:
        source_config = DatabaseConfig(
            type="mysql",
            host=environ.get("DB_SRC_HOST", "localhost"),
            port=_get_port(environ, "DB_SRC_PORT"),
            username=environ.get("DB_SRC_USER", "root"),
            password=environ.get("DB_SRC_PASS", "root"),
            database=environ.get("SRC_DATABASE", "hos"),
            sql_mode=environ.get("DB_SRC_SQL_MODE"),
        )
        target_config = DatabaseConfig(
            type="mysql",
            host=environ.get("DB_DST_HOST", "localhost"),
            port=_get_port(environ, "DB_DST_PORT"),
            username=environ.get("DB_DST_USER", "root"),
            password=environ.get("DB_DST_PASS", "root"),
            database=environ.get("DST_DATABASE", "hos_ai"),
            sql_mode=environ.get("DB_DST_SQL_MODE"),
        )
        pool = PoolSettings(max_connections=_get_int(environ, "SYNC_POOL_SIZE", 10))

        config = SyncConfig(
            source=source_config,
            target=target_config,
            limit=_get_int(environ, "SYNC_LIMIT", 50000),
            batch_size=_get_int(environ, "SYNC_BATCH_SIZE", 500),
            max_workers=default_workers(),
            pool=pool,
        )
        logger.debug(f"最终配置: source={source_config.describe()}, target={target_config.describe()}")
        return config

    except ValueError as e:
        raise ValueError(f"配置加载失败: {str(e)}")
