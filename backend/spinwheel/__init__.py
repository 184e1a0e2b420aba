"""
幸运转盘 - 餐厅展示屏抽奖服务
"""
__version__ = "1.0.0"
