"""将 WebView 静态资源镜像到 iOS / Android 构建目录"""

__version__ = '1.0.0'
