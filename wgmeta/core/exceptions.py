"""wg-meta 异常体系"""


class WGMetaException(Exception):
    """基础异常类"""
    def __init__(self, message: str, details=None):
        self.message = message
        self.details = details
        super().__init__(self.message)


# 解析相关异常（加载配置文件时致命）
class ParseError(WGMetaException):
    """配置文件解析失败"""
    pass


class InvalidSectionError(ParseError):
    """未知的 section 类型"""
    pass


class SectionWithoutIdentifierError(ParseError):
    """section 缺少标识字段（PrivateKey / PublicKey）"""
    pass


class EmptySectionError(ParseError):
    """section 中没有任何属性"""
    pass


class AttributeWithoutSectionError(ParseError):
    """属性出现在任何 section 之外"""
    pass


class DuplicateAliasError(ParseError):
    """同一接口中别名重复"""
    pass


class DuplicateIdentifierError(ParseError):
    """同一接口中标识重复"""
    pass


class MalformedLineError(ParseError):
    """无法拆分为 key = value 的行"""
    pass


class EmptyConfigError(ParseError):
    """配置文件中没有任何 section"""
    pass


class NoConfigFilesError(ParseError):
    """目录中没有匹配的接口配置文件"""
    pass


# 校验相关异常（调用失败，模型保持不变）
class ValidationError(WGMetaException):
    """调用参数校验失败"""
    pass


class InvalidInterfaceError(ValidationError):
    """接口不存在"""
    pass


class InvalidIdentifierError(ValidationError):
    """标识在接口中不存在"""
    pass


class InvalidAliasError(ValidationError):
    """别名在接口中不存在"""
    pass


class InterfaceAlreadyExistsError(ValidationError):
    """接口已存在"""
    pass


class IdentifierAlreadyExistsError(ValidationError):
    """标识（公钥）已存在"""
    pass


class AliasAlreadyExistsError(ValidationError):
    """别名已绑定到其他 section"""
    pass


class InvalidPrefixError(ValidationError):
    """元数据前缀或禁用前缀无效"""
    pass


# 文件读写异常
class ConfigIOError(WGMetaException):
    """配置文件读写失败"""
    pass


# wg 命令异常
class WireguardException(WGMetaException):
    """wg 命令异常"""
    pass


class WireguardCommandError(WireguardException):
    """wg 命令执行失败"""
    pass


class ForwardingError(WireguardException):
    """属性无法转发给 wg set"""
    pass


# 设置文件异常
class SettingsException(WGMetaException):
    """设置文件异常"""
    pass


class SettingsParseError(SettingsException):
    """设置文件解析失败"""
    pass


class SettingsValidationError(SettingsException):
    """设置文件验证失败"""
    pass


class SettingsIOError(SettingsException):
    """设置文件读写失败"""
    pass


# 非致命警告
class IntegrityWarning(UserWarning):
    """配置被外部修改，或 section 已处于目标状态"""
    pass
