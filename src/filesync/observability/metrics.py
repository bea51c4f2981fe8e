"""Prometheus 指标：HTTP 通用 + 文件服务专用（传输字节、失败种类、目录树与哈希耗时）。"""

from prometheus_client import Counter, Histogram

# HTTP 通用由 prometheus-fastapi-instrumentator 自动暴露

transfer_bytes_total = Counter(
    "filesync_transfer_bytes_total",
    "下载/上传传输的字节数",
    ["direction"],
)
operation_errors_total = Counter(
    "filesync_operation_errors_total",
    "按错误种类统计的文件操作失败次数",
    ["kind"],
)
tree_build_seconds = Histogram(
    "filesync_tree_build_seconds",
    "端点目录树构建耗时分布（秒）",
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 15.0),
)
hash_seconds = Histogram(
    "filesync_hash_seconds",
    "文件哈希耗时分布（秒）",
    buckets=(0.001, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0),
)
