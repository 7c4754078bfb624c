from pathlib import Path

import hat.doit.sphinx


root_path = Path(__file__).parent.parent.resolve()
static_path = Path(hat.doit.sphinx.__file__).parent / 'static'

extensions = []

version = (root_path / 'VERSION').read_text().strip()
project = 'hat-mqtt3'
copyright = '2026, Hat Open AUTHORS'
master_doc = 'index'
default_role = 'code'

html_theme = 'furo'
html_static_path = [str(static_path)]
html_css_files = ['hat.css']
html_use_index = False
html_show_sourcelink = False
html_show_sphinx = False
