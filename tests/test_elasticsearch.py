from stacksmith.plugins.elasticsearch import DEFAULT_COOKBOOK, elasticsearch_init
from stacksmith.util import get_att, ref


def test_elasticsearch_init(template):
    result = elasticsearch_init(template, "Search", ref("Vpc"), "subnet-1", "sg-1", "my-key")
    assert result == ref("ESLayer")

    assert template.doc["Parameters"]["ESSearchChefCookbook"]["Default"] == DEFAULT_COOKBOOK
    assert template.doc["Parameters"]["ESSearchSshKeyName"]["Default"] == "my-key"

    resources = template.doc["Resources"]
    assert set(resources) == {"OpsWorksEC2Role", "ServiceRole", "InstanceRole", "ESSearchClusterSecurityGroup",
                              "ESStack", "ESLayer"}
    assert resources["ServiceRole"]["Properties"]["AssumeRolePolicyDocument"]["Statement"][0]["Principal"] == \
        {"Service": ["opsworks.amazonaws.com"]}
    assert resources["InstanceRole"]["Properties"]["Roles"] == [ref("OpsWorksEC2Role")]

    stack = resources["ESStack"]["Properties"]
    assert stack["VpcId"] == ref("Vpc")
    assert stack["DefaultSubnetId"] == "subnet-1"
    assert stack["CustomCookbooksSource"]["Url"] == ref("ESSearchChefCookbook")
    assert stack["DefaultSshKeyName"] == ref("ESSearchSshKeyName")
    assert stack["CustomJson"]["elasticsearch"]["cloud"]["aws"]["region"] == "us-east-1"
    assert stack["CustomJson"]["elasticsearch"]["cluster"]["name"] == "Search-elasticsearch"

    layer = resources["ESLayer"]["Properties"]
    assert layer["StackId"] == ref("ESStack")
    assert layer["CustomSecurityGroupIds"] == [get_att("ESSearchClusterSecurityGroup", "GroupId"), "sg-1"]
    assert layer["VolumeConfigurations"][0]["Size"] == 100


def test_elasticsearch_init_fits_body_limit(template):
    elasticsearch_init(template, "Search", ref("Vpc"), "subnet-1", "sg-1", "my-key")
    assert template.template_body()
