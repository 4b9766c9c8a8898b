"""
命名树存储引擎基本使用示例
"""
import sys
import os

# 添加src到路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from named_tree import NamedTreeSystem
from named_tree.exceptions import WouldCreateCycleError, NotAChildError


def main():
    """主函数"""
    print("=" * 60)
    print("命名树存储引擎 - 基本使用示例")
    print("=" * 60)

    # 1. 创建系统实例
    print("\n1. 初始化系统...")
    system = NamedTreeSystem({
        "system_name": "组织架构",
        "log_level": "INFO",
        "storage_backend": "json",
        "storage_path": os.path.join(os.path.dirname(__file__), "data", "org.json")
    })

    info = system.get_system_info()
    print(f"   系统名称: {info['system_name']}")
    print(f"   存储引擎: {info['storage']}")

    # 2. 创建节点并建立父子关系
    print("\n2. 创建节点...")
    root = system.create_node("root")
    child1 = system.create_node("child1")
    child2 = system.create_node("child2")
    print(f"   节点ID: {root}, {child1}, {child2}")

    system.insert_child(root, child1, 0)
    system.insert_child(root, child2, 1)
    print(f"   深度优先: {system.depth_first(root).names()}")

    # 3. 非法操作
    print("\n3. 非法操作...")
    try:
        system.move_subtree(root, child1, 0)
    except WouldCreateCycleError as e:
        print(f"   ✅ 已拒绝: {e}")

    # 4. 删除子树
    print("\n4. 删除子树...")
    system.delete_subtree(child1)
    print(f"   根节点的子节点: {list(system.build(root).child_ids)}")

    system.remove_child(root, child2)
    try:
        system.remove_child(root, child2)
    except NotAChildError as e:
        print(f"   ✅ 已拒绝: {e}")

    # 5. 批量创建、保存和导出
    print("\n5. 保存与导出...")
    for region in ["华北", "华南"]:
        region_id = system.create_node(region, parent_id=root)
        for city in range(3):
            system.create_node(f"{region}-{city + 1}", parent_id=region_id)

    saved = system.save()
    print(f"   已保存: {saved['tree_id']}, {saved['node_count']} 个节点")

    export_path = os.path.join(os.path.dirname(__file__), "data", "org.xlsx")
    count = system.export_table(export_path)
    print(f"   已导出 {count} 行到 {export_path}")

    print("\n" + system.render_text())

    system.close()
    print("\n" + "=" * 60)
    print("示例运行完成")
    print("=" * 60)


if __name__ == "__main__":
    main()
