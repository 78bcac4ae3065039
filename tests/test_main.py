import os
import sys
import tempfile
import unittest
import zipfile
from unittest.mock import patch, MagicMock

from mule_diagram.main import build_parser, main

ORDERS_XML = """<mule>
    <flow name="orders-main">
        <http:listener path="/orders"/>
        <flow-ref name="enrich"/>
    </flow>
    <sub-flow name="enrich">
        <logger message="enriching"/>
    </sub-flow>
</mule>
"""

POM_XML = """<project xmlns="http://maven.apache.org/POM/4.0.0">
    <artifactId>orders-app</artifactId>
</project>
"""


class TestBuildParser(unittest.TestCase):

    def test_defaults(self):
        args = build_parser().parse_args(['/path/to/project'])
        self.assertEqual(args.source, '/path/to/project')
        self.assertEqual(args.mode, 'auto')
        self.assertIsNone(args.flow)
        self.assertIsNone(args.output)
        self.assertIsNone(args.html_report)
        self.assertIsNone(args.config)
        self.assertFalse(args.summary)
        self.assertFalse(args.verbose)

    def test_invalid_mode_rejected(self):
        with patch('sys.stderr', MagicMock()):
            with self.assertRaises(SystemExit):
                build_parser().parse_args(['/path', '--mode', 'sideways'])


@patch('logging.basicConfig')
class TestMain(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)
        self.project_dir = self.temp_dir.name
        mule_dir = os.path.join(self.project_dir, 'src', 'main', 'mule')
        os.makedirs(mule_dir)
        with open(os.path.join(mule_dir, 'orders.xml'), 'w', encoding='utf-8') as f:
            f.write(ORDERS_XML)
        with open(os.path.join(self.project_dir, 'pom.xml'), 'w', encoding='utf-8') as f:
            f.write(POM_XML)

    def _path(self, name):
        return os.path.join(self.project_dir, name)

    def _read(self, name):
        with open(self._path(name), 'r', encoding='utf-8') as f:
            return f.read()

    @patch('builtins.print')
    def test_prints_definition_to_stdout(self, mock_print, mock_basic_config):
        with patch.object(sys, 'argv', ['mule-diagram', self.project_dir]):
            main()

        mock_basic_config.assert_called_once()
        mock_print.assert_called_once()
        definition = mock_print.call_args[0][0]
        self.assertTrue(definition.startswith("graph TD"))
        self.assertIn("%% Rendering mode: detailed", definition)
        self.assertIn("orders_main -.-> enrich", definition)

    def test_writes_output_file(self, mock_basic_config):
        main([self.project_dir, '--mode', 'full-detailed', '--output', self._path('diagram.mmd')])

        definition = self._read('diagram.mmd')
        self.assertIn("%% Rendering mode: full-detailed", definition)
        self.assertIn("enrich__comp_1", definition)

    def test_writes_html_report_with_artifact_name(self, mock_basic_config):
        main([self.project_dir, '--mode', 'simplified', '--output', self._path('diagram.mmd'),
              '--html-report', self._path('report.html')])

        report = self._read('report.html')
        self.assertIn("orders-app Flow Diagram", report)
        self.assertIn("simplified", report)
        self.assertIn("orders_main", report)

    @patch('mule_diagram.main.generate_console_report')
    def test_summary_uses_effective_mode(self, mock_report, mock_basic_config):
        main([self.project_dir, '--summary', '--output', self._path('diagram.mmd')])

        mock_report.assert_called_once()
        graph, mode = mock_report.call_args[0]
        self.assertEqual(len(graph.nodes), 2)
        self.assertEqual(mode, 'detailed')

    def test_focus_on_single_flow(self, mock_basic_config):
        with open(os.path.join(self.project_dir, 'src', 'main', 'mule', 'other.xml'), 'w', encoding='utf-8') as f:
            f.write('<mule><flow name="unrelated"/></mule>')

        main([self.project_dir, '--flow', 'enrich', '--output', self._path('diagram.mmd')])

        definition = self._read('diagram.mmd')
        self.assertIn("enrich", definition)
        self.assertIn("orders_main", definition)
        self.assertNotIn("unrelated", definition)

    def test_unknown_flow_exits(self, mock_basic_config):
        with self.assertRaises(SystemExit) as cm:
            main([self.project_dir, '--flow', 'missing-flow'])
        self.assertEqual(cm.exception.code, 1)

    def test_missing_source_exits(self, mock_basic_config):
        with self.assertRaises(SystemExit) as cm:
            main([self._path('does-not-exist')])
        self.assertEqual(cm.exception.code, 1)

    def test_source_without_xml_exits(self, mock_basic_config):
        with tempfile.TemporaryDirectory() as empty_dir:
            with self.assertRaises(SystemExit) as cm:
                main([empty_dir])
        self.assertEqual(cm.exception.code, 1)

    def test_invalid_archive_exits(self, mock_basic_config):
        archive_path = self._path('broken.jar')
        with open(archive_path, 'wb') as f:
            f.write(b'not a zip')
        with self.assertRaises(SystemExit) as cm:
            main([archive_path])
        self.assertEqual(cm.exception.code, 1)

    def test_archive_source(self, mock_basic_config):
        archive_path = self._path('orders-app.jar')
        with zipfile.ZipFile(archive_path, 'w') as archive:
            archive.writestr('orders.xml', ORDERS_XML)
            archive.writestr('META-INF/maven/com.acme/orders-app/pom.xml', POM_XML)

        main([archive_path, '--output', self._path('diagram.mmd'), '--html-report', self._path('report.html')])

        self.assertIn("orders_main", self._read('diagram.mmd'))
        self.assertIn("orders-app Flow Diagram", self._read('report.html'))

    def test_settings_file_applied(self, mock_basic_config):
        config_path = self._path('diagram.yaml')
        with open(config_path, 'w', encoding='utf-8') as f:
            f.write("direction: LR\nmax_nodes_for_detailed: 1\n")

        main([self.project_dir, '--config', config_path, '--output', self._path('diagram.mmd')])

        definition = self._read('diagram.mmd')
        self.assertTrue(definition.startswith("graph LR"))
        self.assertIn("%% Rendering mode: simplified", definition)

    def test_invalid_settings_exit(self, mock_basic_config):
        config_path = self._path('diagram.yaml')
        with open(config_path, 'w', encoding='utf-8') as f:
            f.write("direction: sideways\n")

        with self.assertRaises(SystemExit) as cm:
            main([self.project_dir, '--config', config_path])
        self.assertEqual(cm.exception.code, 1)


if __name__ == '__main__':
    unittest.main()
