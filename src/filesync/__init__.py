"""按端点（命名的文件系统根目录）通过 HTTP 暴露目录树、下载、摘要与上传。"""

__version__ = "0.1.0"
