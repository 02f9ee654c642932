# run_tests.py
"""
按模块挑选测试集运行，例如:

    python run_tests.py srs              # 只跑调度引擎
    python run_tests.py store sync -k streak
    python run_tests.py all --allure     # 全部测试并输出 Allure 数据
"""
import sys
import pytest
import argparse
import os
import shutil

ALLURE_RESULTS_DIR = "tests/report/allure_results"

# 测试集名称 -> (pytest 路径, 说明)
SUITES = {
    'srs': (['tests/unit/test_srs.py'], '调度引擎: 升级、重置、到期筛选'),
    'store': (['tests/unit/test_store.py'], '词库: 词表解析、答案判定、连续天数'),
    'sync': (['tests/unit/test_services.py', 'tests/integration/test_sync.py'], 'Google 表格同步'),
    'api': (['tests/integration/'], '全部 HTTP 接口'),
    'e2e': (['tests/e2e/'], '端到端学习流程'),
    'all': (['tests/'], '全部测试'),
}


def build_args(suites, keyword=None, allure_dir=None, quiet=False):
    paths = []
    for name in suites:
        for path in SUITES[name][0]:
            if path not in paths:
                paths.append(path)

    pytest_args = ['-q' if quiet else '-v', '--tb=short', *paths]
    if keyword:
        pytest_args.extend(['-k', keyword])
    if allure_dir:
        pytest_args.append(f'--alluredir={allure_dir}')
    return pytest_args


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Vocalize 测试运行工具',
        epilog='\n'.join(f'  {name:<6} {desc}' for name, (_, desc) in SUITES.items()),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('suites', nargs='*', metavar='SUITE', help='要运行的测试集，默认 all')
    parser.add_argument('-k', dest='keyword', help='按名称过滤测试 (同 pytest -k)')
    parser.add_argument('-q', '--quiet', action='store_true', help='简洁输出')
    parser.add_argument('--allure', action='store_true', help='生成 Allure 可视化报告数据')

    args = parser.parse_args(argv)
    suites = args.suites or ['all']
    unknown = [name for name in suites if name not in SUITES]
    if unknown:
        parser.error(f"未知的测试集: {', '.join(unknown)}")

    allure_dir = None
    if args.allure:
        # 清空旧数据，保证报告只包含本次结果
        if os.path.exists(ALLURE_RESULTS_DIR):
            shutil.rmtree(ALLURE_RESULTS_DIR)
        allure_dir = ALLURE_RESULTS_DIR

    print(f"运行测试集: {', '.join(suites)}")
    exit_code = pytest.main(build_args(suites, args.keyword, allure_dir, args.quiet))

    if allure_dir:
        print(f"测试结果数据已存入: {allure_dir}")
        print(f"查看报告: allure serve {allure_dir}")

    return exit_code

if __name__ == '__main__':
    sys.exit(main())
