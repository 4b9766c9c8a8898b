"""
服务层 - 调用核心接口的外部协作者
"""
