from restlayer.testing.cli import RestlayerCliRunner


def test_config(rc, cli: RestlayerCliRunner):
    result = cli.invoke(rc, ['config', 'mapping'])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0].split() == ['Origin', 'Name', 'Value']
    assert ['restlayer', 'mapping.cycles', 'omit'] in [line.split() for line in lines]
    assert not any('resources.' in line for line in lines)


def test_config_env_format(rc, cli: RestlayerCliRunner):
    result = cli.invoke(rc, ['config', 'services', '--fmt', 'env'])
    assert result.exit_code == 0
    assert 'RESTLAYER_SERVICES__SCOPE' in result.output


def test_resources(rc, cli: RestlayerCliRunner):
    result = cli.invoke(rc, ['resources'])
    assert result.exit_code == 0
    assert result.output.splitlines() == [
        'department  restlayer.testing.models.Department  company.department',
        '  department/employees  restlayer.testing.models.Employee  company.employee',
        'employee  restlayer.testing.models.Employee  company.employee',
        '  employee/assets  restlayer.testing.models.Asset  company.asset',
        '  employee/department  restlayer.testing.models.Department  company.department',
    ]


def test_resources_no_modules(rc, cli: RestlayerCliRunner):
    result = cli.invoke(rc, ['resources', '-m', 'restlayer.testing.services'])
    assert result.exit_code == 0
    assert result.output == ''
