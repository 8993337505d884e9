"""邮件领域模块

该模块包含邮件客户端的领域模型，包括：
- 客户端配置、邮件头摘要、文件夹信息等值对象
- 协议引擎接口（MailStore / MailSpool / MailTransport）
- EmailClientService 服务接口与配置提供者接口
"""
