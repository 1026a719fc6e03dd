import json

import numpy as np

from digitshape.main import build_parser, main


def test_main_synthetic_run(tmp_path):
    out = tmp_path / "out"
    assert main(['--limit', '20', '--output-dir', str(out)]) == 0

    for name in ('results.csv', 'results.json', 'report.txt', 'euler_boxplot.png'):
        assert (out / name).exists()

    data = json.loads((out / 'results.json').read_text(encoding='utf-8'))
    assert data['statistics']['total'] == 20
    assert data['statistics']['success'] == 20


def test_main_npz_with_blank_image(tmp_path):
    images = np.zeros((3, 28, 28), dtype=np.uint8)
    images[0, 5:20, 10:15] = 255
    images[2, 4:24, 6:22] = 255
    images[2, 9:19, 11:17] = 0
    path = tmp_path / "digits.npz"
    np.savez(path, images=images, labels=np.array([1, 7, 0]))

    out = tmp_path / "out"
    assert main(['--source', 'npz', '--path', str(path), '--output-dir', str(out)]) == 0

    data = json.loads((out / 'results.json').read_text(encoding='utf-8'))
    statuses = [r['status'] for r in data['records']]
    assert statuses == ['Success', 'Failed: No region found', 'Success']
    assert data['records'][2]['euler_number'] == 0


def test_main_missing_dataset(tmp_path):
    assert main(['--source', 'folder', '--path', str(tmp_path / "missing"),
                 '--output-dir', str(tmp_path / "out")]) == 1


def test_parser_threshold():
    assert build_parser().parse_args(['--threshold', 'otsu']).threshold == 'otsu'
    assert build_parser().parse_args(['--threshold', '0.35']).threshold == 0.35
    assert build_parser().parse_args([]).threshold == 0.2
