import subprocess
import sys


def test_compile():
    # Base modules must import without the optional propagator installed. Run in a
    # fresh interpreter so modules imported by other tests don't mask the check.
    code = (
        'import sys\n'
        'import topocoords\n'
        'import topocoords.coordinates\n'
        'import topocoords.calc\n'
        'import topocoords.pipeline\n'
        'import topocoords.propagation\n'
        'import topocoords.passes\n'
        'import topocoords.utils.conditional_imports\n'
        "assert 'sgp4' not in sys.modules, 'sgp4 imported by a base module'\n"
    )
    result = subprocess.run(
        [sys.executable, '-c', code], capture_output=True, text=True, check=False
    )
    assert result.returncode == 0, result.stderr
