"""
HMS - 酒店前台管理后端

房态 / 预订生命周期、客房库存、财务流水、餐厅菜单与用户角色管理。
"""
__version__ = "1.0.0"
