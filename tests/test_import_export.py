"""
测试表格导入导出
"""
import pandas as pd
import pytest

from named_tree.core.tree import TreeBuilder
from named_tree.services.import_export import (
    HierarchyImporter, TabularTreeImporter, TabularTreeExporter
)
from named_tree.exceptions import TreeImportError, ValidationError


def write_indented_csv(path, lines):
    frame = pd.DataFrame({"name": lines})
    frame.to_csv(path, index=False)
    return str(path)


class TestTabularTreeImporter:
    """测试导入器"""

    def test_parse_indentation(self):
        importer = TabularTreeImporter()
        frame = pd.DataFrame({"name": ["总部", "  华北", "    北京", "  华南", "", "分部"]})

        rows = importer.parse_frame(frame)
        assert [(r["name"], r["level"]) for r in rows] == [
            ("总部", 0), ("华北", 1), ("北京", 2), ("华南", 1), ("分部", 0)
        ]
        assert importer.stats["rows_skipped"] == 1

    def test_convert_parents(self):
        importer = TabularTreeImporter()
        nodes = importer.convert_to_tree_nodes([
            {"row": 0, "name": "r", "level": 0},
            {"row": 1, "name": "a", "level": 1},
            {"row": 2, "name": "a1", "level": 2},
            {"row": 3, "name": "b", "level": 1},
        ])
        assert [n["parent_row"] for n in nodes] == [None, 0, 1, 0]

    def test_level_jump(self):
        importer = TabularTreeImporter()
        with pytest.raises(TreeImportError) as exc_info:
            importer.convert_to_tree_nodes([
                {"row": 0, "name": "r", "level": 0},
                {"row": 1, "name": "deep", "level": 2},
            ])
        assert exc_info.value.details["row"] == 1

    def test_level_column(self):
        importer = TabularTreeImporter()
        frame = pd.DataFrame({"level": ["0", "1", "1"], "name": ["r", "", "b"]})
        rows = importer.parse_frame(frame)
        # 显式层级时保留空名称
        assert [(r["name"], r["level"]) for r in rows] == [("r", 0), ("", 1), ("b", 1)]

    def test_invalid_level_value(self):
        importer = TabularTreeImporter()
        frame = pd.DataFrame({"level": ["0", "x"], "name": ["r", "a"]})
        with pytest.raises(TreeImportError):
            importer.parse_frame(frame)

    def test_invalid_config(self):
        with pytest.raises(TreeImportError):
            TabularTreeImporter({"indent_width": 0})

    def test_import_csv_into_store(self, tmp_path, store, mutator):
        path = write_indented_csv(tmp_path / "tree.csv", ["root", "  a", "    a1", "  b"])
        importer = TabularTreeImporter()

        root_ids = importer.import_into(path, mutator)
        assert len(root_ids) == 1

        view = TreeBuilder(store).build(root_ids[0])
        assert view.name == "root"
        assert [c.name for c in view.children] == ["a", "b"]
        assert view.children[0].children[0].name == "a1"
        assert importer.stats["nodes_created"] == 4

    def test_failed_import_leaves_store_untouched(self, tmp_path, store, mutator):
        existing = store.create("existing")
        path = write_indented_csv(tmp_path / "bad.csv", ["root", "      too deep"])

        with pytest.raises(TreeImportError):
            TabularTreeImporter().import_into(path, mutator)
        assert store.all_ids() == {existing}

    def test_unsupported_file(self, tmp_path, mutator):
        path = tmp_path / "tree.pdf"
        path.write_text("x", encoding="utf-8")
        importer = TabularTreeImporter()
        assert not importer.validate_file(str(path))
        with pytest.raises(TreeImportError):
            importer.import_into(str(path), mutator)

    def test_metadata(self, tmp_path):
        path = write_indented_csv(tmp_path / "tree.csv", ["root"])
        metadata = TabularTreeImporter().extract_metadata(path)
        assert metadata["file_name"] == "tree.csv"
        assert metadata["file_size"] > 0


class TestTabularTreeExporter:
    """测试导出器"""

    def test_to_rows(self, builder, sample_tree):
        exporter = TabularTreeExporter()
        rows = exporter.to_rows([builder.build(sample_tree['root'])])

        assert [r["name"] for r in rows] == ["root", "a", "a1", "a2", "b", "b1"]
        assert [r["level"] for r in rows] == [0, 1, 2, 2, 1, 2]
        assert rows[0]["parent_id"] is None
        assert rows[3]["parent_id"] == sample_tree['a']
        assert rows[3]["position"] == 1

    def test_to_dataframe(self, builder, sample_tree):
        frame = TabularTreeExporter().to_dataframe(builder.build_forest())
        assert list(frame.columns) == ["node_id", "parent_id", "position", "level", "name"]
        assert pd.isna(frame.loc[0, "parent_id"])
        assert len(frame) == 6

    def test_indented_text(self, builder, sample_tree):
        text = TabularTreeExporter(indent_width=2).to_indented_text([builder.build(sample_tree['root'])])
        assert text.splitlines() == ["root", "  a", "    a1", "    a2", "  b", "    b1"]

    def test_unsupported_format(self, builder, sample_tree, tmp_path):
        with pytest.raises(ValueError):
            TabularTreeExporter().export(builder.build_forest(), str(tmp_path / "out.pdf"))

    @pytest.mark.parametrize("suffix", [".csv", ".tsv", ".xlsx"])
    def test_export_and_reimport(self, builder, sample_tree, tmp_path, suffix, store, mutator):
        path = str(tmp_path / f"tree{suffix}")
        count = TabularTreeExporter().export(builder.build_forest(), path)
        assert count == 6

        # 导入到同一个存储，得到结构相同的新树
        root_ids = TabularTreeImporter().import_into(path, mutator)
        assert len(root_ids) == 1

        original = builder.build(sample_tree['root'])
        imported = builder.build(root_ids[0])
        traversal_names = TabularTreeExporter().to_indented_text([imported])
        assert traversal_names == TabularTreeExporter().to_indented_text([original])
        assert imported.size() == original.size()


class OutlineImporter(HierarchyImporter):
    """以 '-' 个数表示层级的纯文本大纲"""

    def validate_file(self, file_path):
        return file_path.endswith(".outline")

    def extract_metadata(self, file_path):
        return {'file_path': file_path}

    def parse_data(self, file_path):
        rows = []
        with open(file_path, encoding="utf-8") as f:
            for row, line in enumerate(f):
                stripped = line.rstrip("\n")
                if not stripped:
                    continue
                level = len(stripped) - len(stripped.lstrip("-"))
                rows.append({'row': row, 'name': stripped.lstrip("-").strip(), 'level': level})
        return rows


class TestHierarchyImporter:
    """测试层级导入器基类的通用流程"""

    def test_custom_format(self, tmp_path, store, mutator, builder):
        path = tmp_path / "org.outline"
        path.write_text("总部\n-华北\n--北京\n-华南\n分部\n", encoding="utf-8")

        importer = OutlineImporter()
        root_ids = importer.import_into(str(path), mutator)

        assert [builder.build(r).name for r in root_ids] == ["总部", "分部"]
        assert TabularTreeExporter().to_indented_text(builder.build_forest()).splitlines() == [
            "总部", "  华北", "    北京", "  华南", "分部"
        ]
        assert importer.stats == {
            'files_processed': 0,
            'rows_parsed': 0,
            'rows_skipped': 0,
            'nodes_created': 5,
            'trees_created': 2
        }

    def test_rejected_file(self, tmp_path, mutator):
        path = tmp_path / "org.txt"
        path.write_text("a\n", encoding="utf-8")
        with pytest.raises(TreeImportError):
            OutlineImporter().import_into(str(path), mutator)

    def test_load_failure_rolls_back(self, store, mutator):
        existing = store.create("existing")
        nodes = OutlineImporter().convert_to_tree_nodes([
            {'row': 0, 'name': "root", 'level': 0},
            {'row': 1, 'name': None, 'level': 1},
        ])
        with pytest.raises(ValidationError):
            OutlineImporter().load_into(mutator, nodes)
        assert store.all_ids() == {existing}
