import unittest
from unittest.mock import patch, MagicMock

from mule_diagram.graph_builder import build_mule_flow_graph
from mule_diagram.html_reporter import DEFAULT_TITLE, generate_html_report, load_default_template
from mule_diagram.mermaid_renderer import RenderMode, render_mermaid
from mule_diagram.models import MuleFlowGraph


class TestHtmlReporter(unittest.TestCase):

    def setUp(self):
        self.sample_template_string = """
        <title>{{title}}</title>
        <p>Mode: {{mode}} | Generated: {{generated_at}}</p>
        <div id="summary">{{summary_table}}</div>
        <pre class="mermaid">{{mermaid_definition}}</pre>
        <div id="files">{{flows_by_file}}</div>
        <div id="flows">{{flow_table}}</div>
        """
        patcher = patch('mule_diagram.graph_builder.logger', MagicMock())
        patcher.start()
        self.addCleanup(patcher.stop)
        renderer_patcher = patch('mule_diagram.mermaid_renderer.logger', MagicMock())
        renderer_patcher.start()
        self.addCleanup(renderer_patcher.stop)

        self.graph = build_mule_flow_graph({
            "src/main/mule/orders.xml": '<flow name="orders"><flow-ref name="lookup"/></flow>',
            "src/main/mule/common.xml": '<sub-flow name="lookup"><logger/></sub-flow>',
        })

    def test_all_placeholders_replaced(self):
        mermaid = render_mermaid(self.graph, RenderMode.SIMPLIFIED)
        html_output = generate_html_report(self.graph, mermaid, self.sample_template_string,
                                           {'artifact_name': 'orders-api', 'mode': 'simplified'})

        self.assertNotIn("{{", html_output)
        self.assertIn("<title>orders-api Flow Diagram</title>", html_output)
        self.assertIn("Mode: simplified", html_output)
        self.assertIn("<table>", html_output)
        self.assertIn("Sub Flows", html_output)
        self.assertIn("<li><strong>src/main/mule/common.xml</strong>: lookup</li>", html_output)

    def test_mermaid_definition_is_escaped_for_html(self):
        mermaid = 'graph TD\n    a["‹x› & y"] -.-> b'
        html_output = generate_html_report(self.graph, mermaid, self.sample_template_string)

        self.assertIn('a["‹x› &amp; y"] -.-&gt; b', html_output)

    def test_default_title_and_mode(self):
        html_output = generate_html_report(self.graph, "graph TD", self.sample_template_string, None)

        self.assertIn(f"<title>{DEFAULT_TITLE}</title>", html_output)
        self.assertIn("Mode: auto", html_output)

    def test_title_is_escaped(self):
        html_output = generate_html_report(self.graph, "graph TD", "{{title}}", {'artifact_name': 'a<b>'})
        self.assertEqual(html_output, "a&lt;b&gt; Flow Diagram")

    def test_empty_graph(self):
        html_output = generate_html_report(MuleFlowGraph(), "graph TD", self.sample_template_string)

        self.assertIn('<div id="flows"><p>No flows found.</p></div>', html_output)
        self.assertIn('<div id="files"><p>No flows found.</p></div>', html_output)

    def test_default_template_contains_all_placeholders(self):
        template = load_default_template()
        for placeholder in ("{{title}}", "{{mode}}", "{{generated_at}}", "{{summary_table}}",
                            "{{mermaid_definition}}", "{{flows_by_file}}", "{{flow_table}}"):
            self.assertIn(placeholder, template)

        html_output = generate_html_report(self.graph, render_mermaid(self.graph), template)
        self.assertNotIn("{{", html_output)
        self.assertIn('class="mermaid"', html_output)


if __name__ == '__main__':
    unittest.main()
