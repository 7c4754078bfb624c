from hat.doit import common as doit_common
from hat.doit.docs import (build_sphinx,
                           build_pdoc)
from hat.doit.py import (get_task_build_wheel,
                         get_task_run_pytest,
                         get_task_create_pip_requirements,
                         run_flake8)

from . import common


__all__ = ['task_clean_all',
           'task_build',
           'task_check',
           'task_test',
           'task_docs',
           'task_pip_requirements']


build_py_dir = common.build_dir / 'py'
build_docs_dir = common.build_dir / 'docs'


def task_clean_all():
    """Clean all"""
    return {'actions': [(doit_common.rm_rf, [common.build_dir])]}


def task_build():
    """Build"""
    return get_task_build_wheel(src_dir=common.src_py_dir,
                                build_dir=build_py_dir)


def task_check():
    """Check with flake8"""
    return {'actions': [(run_flake8, [common.src_py_dir]),
                        (run_flake8, [common.pytest_dir])]}


def task_test():
    """Test"""
    return get_task_run_pytest()


def task_docs():
    """Docs"""

    def build():
        build_sphinx(src_dir=common.docs_dir,
                     dst_dir=build_docs_dir,
                     project='hat-mqtt3')
        build_pdoc(module='hat.mqtt3',
                   dst_dir=build_docs_dir / 'py_api')

    return {'actions': [build]}


def task_pip_requirements():
    """Create pip requirements"""
    return get_task_create_pip_requirements()
