# config.py
import os

class Config:
    # 请根据实际情况修改数据库连接信息
    # 格式: mysql+pymysql://用户名:密码@主机/数据库名
    SQLALCHEMY_DATABASE_URI = os.getenv('DB_URL', 'mysql+pymysql://root:root@db_host/vocalize')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Google Apps Script 同步地址，可以在设置接口里覆盖
    GAS_URL = os.getenv("GAS_URL", "")
    GAS_TIMEOUT = int(os.getenv("GAS_TIMEOUT", "30"))
