"""Search Pro 异常体系"""


class SearchProException(Exception):
    """基础异常类"""
    def __init__(self, message: str, details: str = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


# 配置相关异常
class ConfigException(SearchProException):
    """配置异常"""
    pass


class ConfigParseError(ConfigException):
    """配置文件解析失败"""
    pass


class ConfigIOError(ConfigException):
    """配置文件读写失败"""
    pass


class ConfigValidationError(ConfigException):
    """配置结构验证失败"""
    pass


class MalformedPathError(ConfigException):
    """属性路径格式错误（空路径或空段）"""
    def __init__(self, message: str, path: str = None):
        super().__init__(message, details=path)
        self.path = path


# 安全相关异常
class SecurityException(SearchProException):
    """安全校验异常"""
    pass


class BlockedPropertyError(SecurityException):
    """属性名被安全守卫拒绝"""
    def __init__(self, message: str, key: str = None):
        super().__init__(message, details=key)
        self.key = key


class UnsafeContentError(SecurityException):
    """内容包含危险模式"""
    def __init__(self, message: str, field: str = None):
        super().__init__(message, details=field)
        self.field = field


# 存储相关异常
class StorageException(SearchProException):
    """持久化存储异常"""
    pass


class StorageQuotaError(StorageException):
    """序列化后的配置超过大小上限"""
    def __init__(self, message: str, size: int = 0, limit: int = 0):
        super().__init__(message, details=f"{size} > {limit}")
        self.size = size
        self.limit = limit


class StorageUnavailableError(StorageException):
    """存储不可用"""
    pass


# 标签页处理器异常
class TabHandlerException(SearchProException):
    """标签页处理器异常"""
    pass
